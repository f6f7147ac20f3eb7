from typing import Any, Union

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.responses import JSONResponse, Response

from app_logging import app_logger
from common.cache_string import gettext
from common.exceptions import AppException


class ApiResponse:
    @staticmethod
    def create_response(success: bool, message: str, status_code: int, data: Any = None) -> JSONResponse:
        data_dict = {"message": message, "success": success, "status_code": status_code}
        if data:
            if isinstance(data, dict) and 'data' in data:
                data_dict |= data
            else:
                data_dict['data'] = data
        else:
            data_dict['data'] = {}
        response_headers = {"Content-Type": "application/json"}
        return JSONResponse(
            content=jsonable_encoder(data_dict),
            status_code=status_code,
            headers=response_headers
        )

    @staticmethod
    def from_service(response: dict, default_status: int = status.HTTP_200_OK) -> JSONResponse:
        return ApiResponse.create_response(
            success=response.get("success"),
            message=response.get("message"),
            status_code=response.get("status_code") or default_status,
            data=response.get("data"),
        )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Union[JSONResponse, Response]:
    errors = exc.errors()
    formatted_errors = []

    for error in errors:
        loc = error.get("loc", [])
        field = ".".join(str(part) for part in loc[1:]) if len(loc) > 1 else loc[-1] if loc else "unknown"
        msg = error.get("msg", "Invalid input")
        formatted_errors.append(f"'{field}' - {msg}")

    first_error = formatted_errors[0] if formatted_errors else gettext("validation_failed")
    app_logger.error(f"Validation error on {request.method} {request.url.path} | Errors: {first_error}")
    return ApiResponse.create_response(
        success=False,
        message=first_error,
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    app_logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path} | {exc.message}")
    return ApiResponse.from_service(exc.to_response())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    app_logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return ApiResponse.create_response(
        success=False,
        message=gettext("something_went_wrong"),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
