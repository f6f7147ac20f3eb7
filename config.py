import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET_KEY = "default-access-secret-key-for-dev-must-be-32-chars"
DEFAULT_JWT_REFRESH_SECRET_KEY = "default-refresh-secret-key-for-dev-must-be-32-chars"
DEFAULT_EMAIL_VERIFICATION_SECRET_KEY = "default-email-verification-key-for-dev-32-chars"


class ServerType(BaseModel):
    PRODUCTION: str = "production"
    DEVELOPMENT: str = "development"
    LOCAL: str = "local"


class Setting(BaseSettings):
    DATABASE_URL: str = "sqlite:///./blumiq.db"
    ALEMBIC_DATABASE_URL: Optional[str] = None
    HOST_URL: str = "0.0.0.0"
    HOST_PORT: int = 8000
    ENV_FASTAPI_SERVER_TYPE: str = "local"

    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET_KEY
    JWT_REFRESH_SECRET_KEY: str = DEFAULT_JWT_REFRESH_SECRET_KEY
    ACCESS_TOKEN_EXPIRY_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRY_DAYS: int = 7
    EMAIL_VERIFICATION_SECRET_KEY: str = DEFAULT_EMAIL_VERIFICATION_SECRET_KEY
    EMAIL_VERIFICATION_EXPIRY_HOURS: int = 24
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    OTP_LENGTH: int = 6
    OTP_VALIDITY_MINUTES: int = 10
    WHITELIST_MOBILE_NUMBER: str = ""

    SMS_GATEWAY_URL: str = ""
    SMS_SENDER_ID: str = ""
    SMS_API_KEY: str = ""

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER_EMAIL: str = ""
    SMTP_PASSWORD: str = ""
    RECIPIENT_ADMIN_EMAIL: str = ""
    IS_PROD: str = "false"

    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_SECRET: str = ""

    AWS_ACCESS_KEY: str = ""
    AWS_SECRET_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    AWS_BUCKET_NAME: str = ""
    PRESIGNED_URL_EXPIRY_SECONDS: int = 3600

    # Default Log type
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",  # set the env file path
        env_file_encoding="utf-8",
        extra="ignore",
    )


app_settings = Setting()
_app_server_type = ServerType()


@lru_cache
def get_current_server_config():
    """
    This will check the ENV_FASTAPI_SERVER_TYPE variable and create an object of configuration according to that.
    :return: Production, Development or Local Config object.
    """
    server_type = os.getenv("ENV_FASTAPI_SERVER_TYPE", app_settings.ENV_FASTAPI_SERVER_TYPE)
    if server_type == _app_server_type.DEVELOPMENT:
        return DevelopmentConfig(_app_server_type.DEVELOPMENT)
    elif server_type == _app_server_type.PRODUCTION:
        return ProductionConfig(_app_server_type.PRODUCTION)
    return LocalConfig(_app_server_type.LOCAL)


class Config(object):
    """
    Set base configuration, env variable configuration and server configuration.
    """

    def __init__(self, server_type: str):
        self.SERVER_TYPE = server_type

    # The starting execution point of the app.
    FASTAPI_APP = "main.py"

    DEBUG: bool = False
    TESTING: bool = False

    DATABASE_URL = app_settings.DATABASE_URL
    ALEMBIC_DATABASE_URL = app_settings.ALEMBIC_DATABASE_URL or app_settings.DATABASE_URL
    HOST_URL = app_settings.HOST_URL
    HOST_PORT = app_settings.HOST_PORT
    LOG_LEVEL = app_settings.LOG_LEVEL

    JWT_SECRET_KEY = app_settings.JWT_SECRET_KEY
    JWT_REFRESH_SECRET_KEY = app_settings.JWT_REFRESH_SECRET_KEY
    ACCESS_TOKEN_EXPIRY_MINUTES = app_settings.ACCESS_TOKEN_EXPIRY_MINUTES
    REFRESH_TOKEN_EXPIRY_DAYS = app_settings.REFRESH_TOKEN_EXPIRY_DAYS
    EMAIL_VERIFICATION_SECRET_KEY = app_settings.EMAIL_VERIFICATION_SECRET_KEY
    EMAIL_VERIFICATION_EXPIRY_HOURS = app_settings.EMAIL_VERIFICATION_EXPIRY_HOURS
    PUBLIC_BASE_URL = app_settings.PUBLIC_BASE_URL

    OTP_LENGTH = app_settings.OTP_LENGTH
    OTP_VALIDITY_MINUTES = app_settings.OTP_VALIDITY_MINUTES
    WHITELIST_MOBILE_NUMBER = app_settings.WHITELIST_MOBILE_NUMBER

    SMS_GATEWAY_URL = app_settings.SMS_GATEWAY_URL
    SMS_SENDER_ID = app_settings.SMS_SENDER_ID
    SMS_API_KEY = app_settings.SMS_API_KEY

    SMTP_HOST = app_settings.SMTP_HOST
    SMTP_PORT = app_settings.SMTP_PORT
    SMTP_USER_EMAIL = app_settings.SMTP_USER_EMAIL
    SMTP_PASSWORD = app_settings.SMTP_PASSWORD
    RECIPIENT_ADMIN_EMAIL = app_settings.RECIPIENT_ADMIN_EMAIL
    IS_PROD = app_settings.IS_PROD

    RAZORPAY_KEY_ID = app_settings.RAZORPAY_KEY_ID
    RAZORPAY_SECRET = app_settings.RAZORPAY_SECRET

    AWS_ACCESS_KEY = app_settings.AWS_ACCESS_KEY
    AWS_SECRET_KEY = app_settings.AWS_SECRET_KEY
    AWS_REGION = app_settings.AWS_REGION
    AWS_BUCKET_NAME = app_settings.AWS_BUCKET_NAME
    PRESIGNED_URL_EXPIRY_SECONDS = app_settings.PRESIGNED_URL_EXPIRY_SECONDS


class LocalConfig(Config):
    """
    This class used to generate the config for the local instance.
    """
    DEBUG: bool = True
    TESTING: bool = True


class DevelopmentConfig(Config):
    """
    This class used to generate the config for the development instance.
    """
    DEBUG: bool = True
    TESTING: bool = True


class ProductionConfig(Config):
    """
    This class used to generate the config for the production instance.
    """


app_config = get_current_server_config()


class ConfigUtils:
    is_local_server = app_config.SERVER_TYPE == _app_server_type.LOCAL
    is_prod_server = app_config.SERVER_TYPE == _app_server_type.PRODUCTION
    is_development_server = app_config.SERVER_TYPE == _app_server_type.DEVELOPMENT

    @staticmethod
    def uses_default_jwt_secrets() -> bool:
        return (
            app_config.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY
            or app_config.JWT_REFRESH_SECRET_KEY == DEFAULT_JWT_REFRESH_SECRET_KEY
        )


# Top level variable to be access for configs
config_utils = ConfigUtils()


class LogConfiguration:
    logger_name: str = "Blumiq"
    logger_formatter: str = "%(asctime)s - %(levelname)s - %(name)s - %(process)d - %(filename)s|%(lineno)s:: %(funcName)s|%(lineno)s:: %(message)s"
    roll_over: str = "MIDNIGHT"
    backup_count: int = 90
    log_file_base_name: str = "log"
    log_file_base_dir: str = f"{os.getcwd()}/logs"
