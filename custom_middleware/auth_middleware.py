import re
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app_logging import app_logger
from common.common_services.jwt_service import JWTService, ExpiredTokenError, TokenError
from common.enums import UserType
from common.exceptions import Unauthorized, Forbidden, AppException
from common.response import ApiResponse

# Deployments behind a reverse proxy may forward the prefixed path
API_PREFIX = "/api/base"
ADMIN_PREFIX = "/admin"

PUBLIC_PATHS = {
    "user": [
        "/auth/register",
        "/auth/login",
        "/auth/refresh-token",
        "/auth/mobile-auth",
        "/auth/verify-mobile-otp",
        "/auth/logout",
        "/auth/forgot-password",
        "/auth/reset-password",
        "/auth/verify-email",
        "/memberships/types",
        "/subscriptions/plans",
    ],
    "admin": [
        "/admin/login"
    ],
    "global": [
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ],
    "general": [
        "/bank-partners",
        "/content/{slug}",
        "/contact",
    ]
}


def _compile_public_patterns() -> list[re.Pattern]:
    regex_patterns = []
    for paths in PUBLIC_PATHS.values():
        for path in paths:
            # Convert FastAPI-style path params ({param}) to regex
            pattern = re.sub(r"{[^/]+}", r"[^/]+", path.rstrip("/") or "/")
            regex_patterns.append(re.compile(f"^{pattern}$"))
    return regex_patterns


PUBLIC_PATTERNS = _compile_public_patterns()


def normalize_path(path: str) -> str:
    if path.startswith(API_PREFIX):
        path = path[len(API_PREFIX):]
    return path.rstrip("/") or "/"


def is_public_path(path: str) -> bool:
    return any(pattern.fullmatch(path) for pattern in PUBLIC_PATTERNS)


def is_admin_path(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(f"{ADMIN_PREFIX}/")


def authenticate(authorization_header: Optional[str], require_admin: bool = False) -> dict[str, Any]:
    """
    Resolve the caller identity from an `Authorization: Bearer <token>` header.

    Raises `Unauthorized` for a missing, expired or invalid token and `Forbidden` when `require_admin` is set
    and the token does not carry the admin user type. Reads nothing but the token itself.
    """
    if not authorization_header or not authorization_header.startswith("Bearer "):
        raise Unauthorized("access_token_required")

    token = authorization_header[len("Bearer "):].strip()
    try:
        payload = JWTService.verify_access_token(token)
    except ExpiredTokenError:
        raise Unauthorized("token_expired")
    except TokenError:
        raise Unauthorized("invalid_token")

    if not payload.get("userId"):
        app_logger.error("[AuthMiddleware] Invalid token payload: missing user ID")
        raise Unauthorized("invalid_token")

    identity = {
        "userId": str(payload.get("userId")),
        "email": payload.get("email"),
        "userType": payload.get("userType"),
    }

    if require_admin and identity["userType"] != UserType.admin.value:
        app_logger.warning(f"[AuthMiddleware] Non-admin user {identity['userId']} tried accessing admin route")
        raise Forbidden("admin_access_required")

    return identity


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Let CORS preflight through untouched
        if request.method == "OPTIONS":
            return await call_next(request)

        request_path = normalize_path(request.url.path)

        if is_public_path(request_path):
            app_logger.debug(f"[AuthMiddleware] Public path, skipping auth: {request_path}")
            return await call_next(request)

        try:
            identity = authenticate(
                request.headers.get("Authorization"), require_admin=is_admin_path(request_path)
            )
        except AppException as e:
            app_logger.warning(f"[AuthMiddleware] {request.method} {request_path} rejected: {e.message}")
            return ApiResponse.from_service(e.to_response())

        app_logger.info(f"[AuthMiddleware] Token verified | user_id: {identity['userId']}")
        request.state.user = identity

        # All good, proceed
        return await call_next(request)


def get_current_user(request: Request) -> dict[str, Any]:
    user = getattr(request.state, "user", None)
    if not user:
        raise Unauthorized("access_token_required")
    return user


def get_current_admin(request: Request) -> dict[str, Any]:
    user = get_current_user(request)
    if user.get("userType") != UserType.admin.value:
        raise Forbidden("admin_access_required")
    return user


def get_current_user_id(request: Request) -> int:
    return int(get_current_user(request)["userId"])


def get_current_admin_id(request: Request) -> int:
    return int(get_current_admin(request)["userId"])
