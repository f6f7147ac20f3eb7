import datetime

import jwt
import pytest

from common.common_services.jwt_service import JWTService, ExpiredTokenError, InvalidTokenError
from config import app_config

PAYLOAD = {"userId": "7", "email": "user@example.com", "userType": "customer"}


def test_access_token_round_trip_keeps_identity_claims():
    token = JWTService.issue_access_token(PAYLOAD)

    decoded = JWTService.verify_access_token(token)

    assert {key: decoded[key] for key in JWTService.CLAIMS} == PAYLOAD
    assert decoded["exp"] > decoded["iat"]


def test_access_and_refresh_tokens_use_distinct_secrets():
    tokens = JWTService.create_tokens(PAYLOAD)

    with pytest.raises(InvalidTokenError):
        JWTService.verify_access_token(tokens["refresh_token"])
    with pytest.raises(InvalidTokenError):
        JWTService.verify_refresh_token(tokens["access_token"])


def test_expired_token_is_reported_as_expired():
    past = datetime.datetime.now(datetime.UTC) - datetime.timedelta(hours=1)
    token = jwt.encode(
        {**PAYLOAD, "iat": past - datetime.timedelta(minutes=15), "exp": past},
        app_config.JWT_SECRET_KEY, algorithm=JWTService.ALGORITHM
    )

    with pytest.raises(ExpiredTokenError):
        JWTService.verify_access_token(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_invalid(token):
    with pytest.raises(InvalidTokenError):
        JWTService.verify_access_token(token)


def test_token_without_expiry_is_rejected():
    token = jwt.encode(PAYLOAD, app_config.JWT_SECRET_KEY, algorithm=JWTService.ALGORITHM)

    with pytest.raises(InvalidTokenError):
        JWTService.verify_access_token(token)


def test_refresh_issues_only_a_new_access_token():
    refresh_token = JWTService.issue_refresh_token(PAYLOAD)

    refreshed = JWTService.refresh_access_token(refresh_token)

    assert set(refreshed) == {"access_token"}
    assert JWTService.verify_access_token(refreshed["access_token"])["userId"] == "7"
