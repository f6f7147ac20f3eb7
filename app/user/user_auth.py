from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.auth_schemas import RegisterRequest, LoginRequest, MobileAuthRequest, VerifyOTPRequest, RefreshToken, \
    ResetPasswordRequest
from services.auth_service import UserAuthService
from services.dependencies import get_user_auth_service

router = APIRouter(prefix="/auth", tags=["User Authentication API's"])


@router.post("/register", summary="Register With Email And Password")
def register(form_data: RegisterRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.register(form_data=form_data)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_201_CREATED),
        data=response.get("data"),
    )


@router.post("/login", summary="Login With Email Or Phone And Password")
def login(login_request: LoginRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.login(login_request=login_request)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/mobile-auth", summary="Send OTP for Mobile Login")
def send_otp(request_data: MobileAuthRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.send_otp(request_data=request_data)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/verify-mobile-otp", summary="Verify OTP for Mobile Login")
def verify_otp(verify_otp_request: VerifyOTPRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.verify_otp(verify_otp_request=verify_otp_request)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/refresh-token", summary="Refresh Access Token")
def refresh_token(token: RefreshToken, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.refresh_token(token)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/logout", summary="Logout")
def logout():
    response = UserAuthService.logout()
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/forgot-password", summary="Send OTP to Reset Password")
def forgot_password(request_data: MobileAuthRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.forgot_password(request_data=request_data)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/reset-password", summary="Reset Password With OTP")
def reset_password(form_data: ResetPasswordRequest, auth_service: UserAuthService = Depends(get_user_auth_service)):
    response = auth_service.reset_password(form_data=form_data)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data"),
    )


@router.post("/send-verification-email", summary="Email a Verification Link")
def send_verification_email(
        background_tasks: BackgroundTasks,
        user_id: int = Depends(get_current_user_id),
        auth_service: UserAuthService = Depends(get_user_auth_service)
):
    return ApiResponse.from_service(auth_service.send_verification_email(user_id, background_tasks))


@router.get("/verify-email", summary="Verify Email Address")
def verify_email(
        token: str = Query(..., description="Token from the verification email"),
        auth_service: UserAuthService = Depends(get_user_auth_service)
):
    return ApiResponse.from_service(auth_service.verify_email(token))
