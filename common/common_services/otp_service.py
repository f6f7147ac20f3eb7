import datetime

import pyotp
from pyotp.utils import strings_equal

from app_logging import app_logger
from config import app_config

STATIC_WHITELIST_OTP = "123456"


class OTPService:
    @staticmethod
    def generate_secret() -> str:
        """Generate a random secret key for TOTP."""
        return pyotp.random_base32()

    @classmethod
    def is_whitelisted(cls, phone: str) -> bool:
        whitelist = [number.strip() for number in (app_config.WHITELIST_MOBILE_NUMBER or "").split(",")]
        return phone in [number for number in whitelist if number]

    @classmethod
    def generate_otp(cls, phone: str, length: int | None = None) -> str:
        """Generate a numeric one-time code for the given phone number."""
        if cls.is_whitelisted(phone):
            app_logger.info(f"Whitelisted number {phone[-4:]}, using static OTP")
            return STATIC_WHITELIST_OTP

        digits = length or app_config.OTP_LENGTH
        return pyotp.TOTP(cls.generate_secret(), digits=digits).now()

    @staticmethod
    def expiry_from(now: datetime.datetime) -> datetime.datetime:
        return now + datetime.timedelta(minutes=app_config.OTP_VALIDITY_MINUTES)

    @staticmethod
    def is_expired(expires_at: datetime.datetime | None, now: datetime.datetime) -> bool:
        return expires_at is None or now > expires_at

    @staticmethod
    def matches(submitted: str, stored: str | None) -> bool:
        return bool(stored) and strings_equal(str(submitted), str(stored))
