from typing import Any, Dict, Optional

from starlette import status

from app_logging import app_logger
from common.cache_string import gettext


class AppException(Exception):
    """
    Base class of the error taxonomy. Each subclass maps to one HTTP status and carries a message
    key resolved through `gettext` so clients always receive a user safe message.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key: str = "something_went_wrong"

    def __init__(self, message_key: Optional[str] = None, *format_args: Any, data: Optional[dict] = None):
        self.message_key = message_key or self.message_key
        self.format_args = format_args
        self.data = data or {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        text = gettext(self.message_key)
        return text.format(*self.format_args) if self.format_args else text

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "status_code": self.status_code,
            "data": self.data,
        }


class ValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message_key = "validation_failed"


class Unauthorized(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    message_key = "access_token_required"


class Forbidden(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    message_key = "admin_access_required"


class NotFound(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    message_key = "not_found"


class Conflict(AppException):
    status_code = status.HTTP_409_CONFLICT
    message_key = "already_exists"


class InvalidStateTransition(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message_key = "invalid_state_transition"


class InternalError(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key = "something_went_wrong"


def internal_error_response(context: str, e: Exception) -> Dict[str, Any]:
    app_logger.exception(f"{context}: {e}")
    return InternalError().to_response()
