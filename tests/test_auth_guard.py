import datetime

import jwt
import pytest

from common.common_services.jwt_service import JWTService
from common.exceptions import Unauthorized, Forbidden
from config import app_config
from custom_middleware.auth_middleware import authenticate, is_public_path, normalize_path

CUSTOMER = {"userId": "3", "email": "c@example.com", "userType": "customer"}
ADMIN = {"userId": "1", "email": "a@example.com", "userType": "admin"}


def bearer(payload):
    return f"Bearer {JWTService.issue_access_token(payload)}"


def test_valid_token_yields_identity():
    assert authenticate(bearer(CUSTOMER)) == CUSTOMER


@pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc"])
def test_missing_or_malformed_header(header):
    with pytest.raises(Unauthorized) as exc_info:
        authenticate(header)
    assert exc_info.value.message_key == "access_token_required"


def test_expired_token():
    past = datetime.datetime.now(datetime.UTC) - datetime.timedelta(minutes=1)
    token = jwt.encode({**CUSTOMER, "iat": past - datetime.timedelta(minutes=15), "exp": past},
                       app_config.JWT_SECRET_KEY, algorithm="HS256")

    with pytest.raises(Unauthorized) as exc_info:
        authenticate(f"Bearer {token}")
    assert exc_info.value.message_key == "token_expired"


def test_refresh_token_is_not_accepted_as_access_token():
    with pytest.raises(Unauthorized) as exc_info:
        authenticate(f"Bearer {JWTService.issue_refresh_token(CUSTOMER)}")
    assert exc_info.value.message_key == "invalid_token"


def test_admin_guard_rejects_customer_with_forbidden():
    with pytest.raises(Forbidden) as exc_info:
        authenticate(bearer(CUSTOMER), require_admin=True)
    assert exc_info.value.status_code == 403


def test_admin_guard_accepts_admin():
    assert authenticate(bearer(ADMIN), require_admin=True)["userType"] == "admin"


def test_admin_guard_checks_token_before_role():
    with pytest.raises(Unauthorized):
        authenticate(None, require_admin=True)


@pytest.mark.parametrize("path, expected", [
    ("/auth/login", True),
    ("/api/base/auth/login/", True),
    ("/content/privacy-policy", True),
    ("/admin/login", True),
    ("/admin/content/privacy-policy", False),
    ("/loans", False),
    ("/admin/users", False),
])
def test_public_paths(path, expected):
    assert is_public_path(normalize_path(path)) is expected


def test_protected_route_without_token_returns_401(client):
    response = client.get("/loans")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_customer_on_admin_route_returns_403(client, customer_headers):
    response = client.get("/admin/loans", headers=customer_headers)

    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"


def test_admin_on_admin_route_is_allowed(client, admin_headers):
    assert client.get("/admin/loans", headers=admin_headers).status_code == 200
