import datetime
from typing import Any

import jwt

from app_logging import app_logger
from config import app_config


class TokenError(Exception):
    pass


class ExpiredTokenError(TokenError):
    pass


class InvalidTokenError(TokenError):
    pass


class JWTService:
    """
        A service class for handling JWT-based authentication, including access token and refresh token generation
        and verification. Access and refresh tokens are signed with distinct secrets, so one can never be replayed
        as the other.
    """

    ALGORITHM = "HS256"
    CLAIMS = ("userId", "email", "userType")
    EMAIL_VERIFICATION_PURPOSE = "email_verification"

    @classmethod
    def _secret_key(cls) -> str:
        return app_config.JWT_SECRET_KEY

    @classmethod
    def _refresh_secret_key(cls) -> str:
        return app_config.JWT_REFRESH_SECRET_KEY

    @classmethod
    def build_payload(cls, user) -> dict[str, Any]:
        return {
            "userId": str(user.id),
            "email": user.email,
            "userType": user.user_type.value if hasattr(user.user_type, "value") else user.user_type,
        }

    @classmethod
    def _encode(cls, data: dict, secret: str, lifetime: datetime.timedelta) -> str:
        now = datetime.datetime.now(datetime.UTC)
        payload = {key: value for key, value in data.items() if key not in ("exp", "iat", "nbf")}
        payload.update({"iat": now, "exp": now + lifetime})
        return jwt.encode(payload, secret, algorithm=cls.ALGORITHM)

    @classmethod
    def issue_access_token(cls, data: dict) -> str:
        return cls._encode(
            data, cls._secret_key(), datetime.timedelta(minutes=app_config.ACCESS_TOKEN_EXPIRY_MINUTES)
        )

    @classmethod
    def issue_refresh_token(cls, data: dict) -> str:
        return cls._encode(
            data, cls._refresh_secret_key(), datetime.timedelta(days=app_config.REFRESH_TOKEN_EXPIRY_DAYS)
        )

    @classmethod
    def create_tokens(cls, data: dict, is_refresh: bool = True) -> dict[str, str]:
        """
        Generates both access and refresh tokens with respective expiration times.

        Args:
            data (dict): The payload data to encode in the tokens.
            is_refresh (bool, optional): Indicates whether to generate a refresh token. Defaults to True.

        Returns:
            dict: A dictionary containing the access token and, when requested, the refresh token.
        """
        data_dict = {"access_token": cls.issue_access_token(data)}
        if is_refresh:
            data_dict["refresh_token"] = cls.issue_refresh_token(data)
        return data_dict

    @classmethod
    def verify(cls, token: str, secret: str) -> dict[str, Any]:
        """
        Verifies and decodes a token signed with `secret`.

        Raises:
            ExpiredTokenError: the signature is valid but `exp` has passed.
            InvalidTokenError: malformed token, wrong secret or missing claims.
        """
        if not token:
            raise InvalidTokenError("empty token")
        try:
            return jwt.decode(
                token, secret, algorithms=[cls.ALGORITHM], options={"require": ["exp", "iat"]}
            )
        except jwt.ExpiredSignatureError as e:
            app_logger.info(f"Expired token presented: {token[:12]}...")
            raise ExpiredTokenError(str(e)) from e
        except jwt.InvalidTokenError as e:
            app_logger.info(f"Invalid token presented: {token[:12]}... | {e}")
            raise InvalidTokenError(str(e)) from e

    @classmethod
    def verify_access_token(cls, token: str) -> dict[str, Any]:
        return cls.verify(token, cls._secret_key())

    @classmethod
    def verify_refresh_token(cls, token: str) -> dict[str, Any]:
        return cls.verify(token, cls._refresh_secret_key())

    @classmethod
    def issue_email_verification_token(cls, user) -> str:
        # Bound to the address it was sent to; changing the email invalidates outstanding links
        return cls._encode(
            {"userId": str(user.id), "email": user.email, "purpose": cls.EMAIL_VERIFICATION_PURPOSE},
            app_config.EMAIL_VERIFICATION_SECRET_KEY,
            datetime.timedelta(hours=app_config.EMAIL_VERIFICATION_EXPIRY_HOURS),
        )

    @classmethod
    def verify_email_verification_token(cls, token: str) -> dict[str, Any]:
        payload = cls.verify(token, app_config.EMAIL_VERIFICATION_SECRET_KEY)
        if payload.get("purpose") != cls.EMAIL_VERIFICATION_PURPOSE or not payload.get("userId"):
            raise InvalidTokenError("not an email verification token")
        return payload

    @classmethod
    def refresh_access_token(cls, refresh_token: str) -> dict[str, str]:
        payload = cls.verify_refresh_token(refresh_token)
        filtered_payload = {k: v for k, v in payload.items() if k in cls.CLAIMS}
        return cls.create_tokens(filtered_payload, is_refresh=False)
