import datetime
from unittest.mock import patch

import pytest

from common.enums import UserStatus, UserType
from common.utils import MAX_PROFILE_IMAGE_SIZE_BYTES
from db_domains.db_interface import DBInterface
from main import app
from models.user import User
from services.dependencies import get_storage_client
from tests.conftest import auth_headers, create_user, FakeStorage, TEST_PASSWORD

REGISTRATION = {
    "full_name": "Asha Verma",
    "email": "asha@example.com",
    "phone_number": "9123456780",
    "password": "Str0ngPass!",
    "city": "Pune",
    "pincode": "411001",
}


def read_user(database, phone_number):
    return DBInterface(User, database).read_single_by_fields([User.phone_number == phone_number])


def test_register_returns_tokens_and_safe_user(client):
    response = client.post("/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert set(data["token"]) == {"access_token", "refresh_token"}
    assert data["user"]["email"] == "asha@example.com"
    assert data["user"]["status"] == "active"
    assert "password" not in data["user"]
    assert "phone_otp" not in data["user"]


def test_register_duplicate_is_conflict(client):
    client.post("/auth/register", json=REGISTRATION)

    response = client.post("/auth/register", json={**REGISTRATION, "email": "another@example.com"})

    assert response.status_code == 409


@pytest.mark.parametrize("override", [
    {"phone_number": "5123456789"},
    {"password": "short"},
    {"email": "not-an-email"},
    {"pincode": "011001"},
    {"user_type": "admin"},
])
def test_register_validation_errors_are_400(client, override):
    response = client.post("/auth/register", json={**REGISTRATION, **override})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_login_with_email_or_phone(client, customer):
    for login in ("customer@example.com", "9876543210"):
        response = client.post("/auth/login", json={"email_or_phone": login, "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == customer.id


def test_login_failures_are_indistinguishable(client, customer):
    wrong_password = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": "nope-nope"})
    unknown_user = client.post("/auth/login", json={"email_or_phone": "nobody@example.com", "password": "nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json()["message"] == unknown_user.json()["message"]


def test_suspended_user_cannot_login(client, database):
    create_user(database, "9811111111", email="blocked@example.com", status=UserStatus.suspended)

    response = client.post("/auth/login", json={"email_or_phone": "9811111111", "password": TEST_PASSWORD})

    assert response.status_code == 403


def test_refresh_token_flow(client, customer):
    login = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": TEST_PASSWORD}).json()

    response = client.post("/auth/refresh-token", json={"refresh_token": login["data"]["token"]["refresh_token"]})

    assert response.status_code == 200
    access_token = response.json()["data"]["access_token"]
    profile = client.get("/users/profile", headers={"Authorization": f"Bearer {access_token}"})
    assert profile.status_code == 200
    assert profile.json()["data"]["phone_number"] == "9876543210"


def test_refresh_with_access_token_is_rejected(client, customer):
    login = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": TEST_PASSWORD}).json()

    response = client.post("/auth/refresh-token", json={"refresh_token": login["data"]["token"]["access_token"]})

    assert response.status_code == 401


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_mobile_auth_creates_pending_user_and_verifies(send_sms, client, database):
    response = client.post("/auth/mobile-auth", json={"phone_number": "9555512345"})

    assert response.status_code == 200
    send_sms.assert_called_once()
    user = read_user(database, "9555512345")
    assert user.status == UserStatus.pending_verification
    assert user.user_type == UserType.customer
    assert len(user.phone_otp) == 6

    verify = client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": user.phone_otp})

    assert verify.status_code == 200
    assert "access_token" in verify.json()["data"]["token"]
    user = read_user(database, "9555512345")
    assert user.status == UserStatus.active
    assert user.is_phone_verified is True
    assert user.phone_otp is None


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_otp_is_single_use(send_sms, client, database):
    client.post("/auth/mobile-auth", json={"phone_number": "9555512345"})
    otp = read_user(database, "9555512345").phone_otp
    client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": otp})

    replay = client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": otp})

    assert replay.status_code == 400


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_otp_expires_after_validity_window(send_sms, client, database):
    client.post("/auth/mobile-auth", json={"phone_number": "9555512345"})
    user = read_user(database, "9555512345")
    otp = user.phone_otp
    eleven_minutes_later = user.phone_otp_expires_at + datetime.timedelta(minutes=1)

    with patch("services.auth_service.utc_now", return_value=eleven_minutes_later):
        response = client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": otp})

    assert response.status_code == 400
    assert response.json()["message"] == "OTP has expired. Please request a new one."
    user = read_user(database, "9555512345")
    assert user.phone_otp is None
    assert user.phone_otp_expires_at is None


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_wrong_otp_is_rejected_and_kept(send_sms, client, database):
    client.post("/auth/mobile-auth", json={"phone_number": "9555512345"})
    otp = read_user(database, "9555512345").phone_otp
    wrong = "000000" if otp != "000000" else "111111"

    response = client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": wrong})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OTP. Please check and try again."
    assert read_user(database, "9555512345").phone_otp == otp


@patch("services.auth_service.SMSService.send_sms", return_value=False)
def test_sms_failure_is_reported(send_sms, client):
    response = client.post("/auth/mobile-auth", json={"phone_number": "9555512345"})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send OTP. Please try again or contact support."


@pytest.mark.parametrize("otp", ["12345", "abcdef", "1234567"])
def test_verify_otp_format_is_validated(client, otp):
    response = client.post("/auth/verify-mobile-otp", json={"phone_number": "9555512345", "otp": otp})

    assert response.status_code == 400


@patch("services.auth_service.SMSService.send_sms")
def test_whitelisted_number_gets_static_otp_without_sms(send_sms, client, database, monkeypatch):
    from config import app_config
    monkeypatch.setattr(app_config, "WHITELIST_MOBILE_NUMBER", "9999999999, 8888888888")

    response = client.post("/auth/mobile-auth", json={"phone_number": "8888888888"})

    assert response.status_code == 200
    send_sms.assert_not_called()
    assert read_user(database, "8888888888").phone_otp == "123456"


def test_update_profile(client, customer_headers):
    response = client.put("/users/profile", headers=customer_headers, json={"full_name": "Renamed", "city": "Delhi"})

    assert response.status_code == 200
    assert response.json()["data"]["full_name"] == "Renamed"
    assert response.json()["data"]["city"] == "Delhi"


def test_update_profile_email_taken(client, customer_headers, other_customer):
    response = client.put("/users/profile", headers=customer_headers, json={"email": "other@example.com"})

    assert response.status_code == 409


def test_logout_is_public_acknowledgement(client):
    assert client.post("/auth/logout").status_code == 200


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_password_reset_with_otp(send_sms, client, database, customer):
    response = client.post("/auth/forgot-password", json={"phone_number": "9876543210"})

    assert response.status_code == 200
    send_sms.assert_called_once()
    assert "reset your password" in send_sms.call_args.args[1]
    otp = read_user(database, "9876543210").phone_otp

    reset = client.post("/auth/reset-password",
                        json={"phone_number": "9876543210", "otp": otp, "new_password": "BrandNew@2024"})

    assert reset.status_code == 200
    assert reset.json()["message"] == "Password reset successful. You can now log in."
    assert read_user(database, "9876543210").phone_otp is None
    old_login = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": TEST_PASSWORD})
    new_login = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": "BrandNew@2024"})
    assert old_login.status_code == 401
    assert new_login.status_code == 200


def test_forgot_password_for_unknown_number(client):
    response = client.post("/auth/forgot-password", json={"phone_number": "9555512345"})

    assert response.status_code == 404


@patch("services.auth_service.SMSService.send_sms", return_value=True)
def test_reset_password_with_wrong_otp_keeps_old_password(send_sms, client, database, customer):
    client.post("/auth/forgot-password", json={"phone_number": "9876543210"})
    otp = read_user(database, "9876543210").phone_otp
    wrong = "000000" if otp != "000000" else "111111"

    response = client.post("/auth/reset-password",
                           json={"phone_number": "9876543210", "otp": wrong, "new_password": "BrandNew@2024"})

    assert response.status_code == 400
    login = client.post("/auth/login", json={"email_or_phone": "9876543210", "password": TEST_PASSWORD})
    assert login.status_code == 200


def test_reset_password_without_pending_otp(client, customer):
    response = client.post("/auth/reset-password",
                           json={"phone_number": "9876543210", "otp": "123456", "new_password": "BrandNew@2024"})

    assert response.status_code == 400
    assert response.json()["message"] == "No OTP pending for this number. Please request a new OTP."


def test_reset_password_rejects_short_password(client, customer):
    response = client.post("/auth/reset-password",
                           json={"phone_number": "9876543210", "otp": "123456", "new_password": "short"})

    assert response.status_code == 400


def request_verification_link(client, headers):
    with patch("services.auth_service.EmailService.send_email", return_value=True) as send_email:
        response = client.post("/auth/send-verification-email", headers=headers)
    assert response.status_code == 200
    send_email.assert_called_once()
    plain_body = send_email.call_args.args[1]
    return plain_body.split("token=")[1].split()[0]


def test_email_verification_flow(client, database, customer, customer_headers):
    token = request_verification_link(client, customer_headers)

    response = client.get("/auth/verify-email", params={"token": token})

    assert response.status_code == 200
    assert response.json()["message"] == "Email verified successfully"
    assert read_user(database, "9876543210").email_verified_at is not None
    again = client.post("/auth/send-verification-email", headers=customer_headers)
    assert again.status_code == 400


def test_verification_link_is_void_after_email_change(client, database, customer, customer_headers):
    token = request_verification_link(client, customer_headers)
    client.put("/users/profile", headers=customer_headers, json={"email": "changed@example.com"})

    response = client.get("/auth/verify-email", params={"token": token})

    assert response.status_code == 400
    assert read_user(database, "9876543210").email_verified_at is None


def test_access_token_is_not_a_verification_token(client, customer, customer_headers):
    access_token = customer_headers["Authorization"].split()[1]

    response = client.get("/auth/verify-email", params={"token": access_token})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification token"


def test_verification_email_needs_an_address(client, database):
    user = create_user(database, "9811111111")

    response = client.post("/auth/send-verification-email", headers=auth_headers(user))

    assert response.status_code == 400


@pytest.fixture
def profile_storage(client):
    storage = FakeStorage()
    app.dependency_overrides[get_storage_client] = lambda: storage
    return storage


def test_upload_profile_picture(client, database, profile_storage, customer, customer_headers):
    response = client.post("/users/profile/picture", headers=customer_headers,
                           files={"file": ("me.png", b"\x89PNG test", "image/png")})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["profile_image"].startswith(f"profile_images/{customer.id}/")
    assert data["profile_image_url"].startswith("https://bucket.example.com/profile_images/")
    assert profile_storage.objects[data["profile_image"]] == b"\x89PNG test"
    assert read_user(database, "9876543210").profile_image == data["profile_image"]


def test_profile_picture_must_be_jpeg_or_png(client, profile_storage, customer_headers):
    response = client.post("/users/profile/picture", headers=customer_headers,
                           files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file type: application/pdf. Only JPEG and PNG images are allowed."
    assert profile_storage.objects == {}


def test_profile_picture_size_limit(client, profile_storage, customer_headers):
    oversized = b"0" * (MAX_PROFILE_IMAGE_SIZE_BYTES + 1)

    response = client.post("/users/profile/picture", headers=customer_headers,
                           files={"file": ("big.jpg", oversized, "image/jpeg")})

    assert response.status_code == 400
    assert response.json()["message"] == "Profile picture must be less than 5MB"
    assert profile_storage.objects == {}


def test_profile_picture_without_storage(client, profile_storage, customer_headers):
    profile_storage.is_configured = False

    response = client.post("/users/profile/picture", headers=customer_headers,
                           files={"file": ("me.png", b"\x89PNG test", "image/png")})

    assert response.status_code == 500


def test_profile_image_is_not_writable_through_profile_update(client, database, customer_headers):
    client.put("/users/profile", headers=customer_headers, json={"profile_image": "https://evil.example.com/x.png"})

    assert read_user(database, "9876543210").profile_image is None


def test_admin_profile(client, admin, admin_headers, customer_headers):
    response = client.get("/admin/profile", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["id"] == admin.id
    assert response.json()["data"]["user_type"] == "admin"
    assert "password" not in response.json()["data"]
    assert client.get("/admin/profile", headers=customer_headers).status_code == 403
