from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette import status

from common.enums import UserStatus, UserType
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_admin_id
from schemas.auth_schemas import AdminLoginRequest
from services.auth_service import AdminAuthService
from services.dependencies import get_admin_auth_service

router = APIRouter(prefix="/admin", tags=["Admin Authentication API's"])


@router.post("/login", summary="Admin Authentication")
def admin_authentication(
        login_request: AdminLoginRequest, admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)
):
    response = admin_auth_service.login(login_request=login_request)

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.get("/profile", summary="Get Admin Profile")
def get_admin_profile(
        admin_id: int = Depends(get_current_admin_id),
        admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)
):
    return ApiResponse.from_service(admin_auth_service.get_profile_details(str(admin_id)))


@router.get("/users", summary="Get All Users")
def get_all_users(
        search: Optional[str] = Query(None, description="Search text for name, phone, email"),
        status_filter: Optional[UserStatus] = Query(None, description="Filter by User Status"),
        user_type: Optional[UserType] = Query(None, description="Filter by User Type"),
        order_by: Optional[str] = Query(None, description="Field Name to Order By"),
        order_direction: Optional[str] = Query(None, description="Field Name to Order Direction"),
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
        admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)
):
    response = admin_auth_service.get_all_users(
        search=search, status_filter=status_filter, user_type=user_type,
        order_by=order_by, order_direction=order_direction, page=page, limit=limit
    )

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.get("/users/{user_id}", summary="Get User Details")
def get_user_details(user_id: int, admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)):
    return ApiResponse.from_service(admin_auth_service.get_user_details(user_id))


@router.post("/users/{user_id}/suspend", summary="Suspend User")
def suspend_user(user_id: int, admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)):
    return ApiResponse.from_service(admin_auth_service.set_user_status(user_id, UserStatus.suspended))


@router.post("/users/{user_id}/activate", summary="Activate User")
def activate_user(user_id: int, admin_auth_service: AdminAuthService = Depends(get_admin_auth_service)):
    return ApiResponse.from_service(admin_auth_service.set_user_status(user_id, UserStatus.active))
