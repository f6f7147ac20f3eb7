from fastapi import APIRouter, Depends, File, UploadFile

from common.common_services.aws_services import AWSClient
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.auth_schemas import UpdateProfileRequest
from services.auth_service import UserAuthService
from services.dependencies import get_user_auth_service, get_storage_client

router = APIRouter(prefix="/users", tags=["User Profile API's"])


@router.get("/profile", summary="Get Profile Details")
def get_profile(
        user_id: int = Depends(get_current_user_id),
        auth_service: UserAuthService = Depends(get_user_auth_service)
):
    return ApiResponse.from_service(auth_service.get_profile_details(str(user_id)))


@router.put("/profile", summary="Update Profile Details")
def update_profile(
        form_data: UpdateProfileRequest,
        user_id: int = Depends(get_current_user_id),
        auth_service: UserAuthService = Depends(get_user_auth_service)
):
    return ApiResponse.from_service(auth_service.update_profile(str(user_id), form_data))


@router.post("/profile/picture", summary="Upload Profile Picture")
async def upload_profile_picture(
        file: UploadFile = File(...),
        user_id: int = Depends(get_current_user_id),
        auth_service: UserAuthService = Depends(get_user_auth_service),
        aws_client: AWSClient = Depends(get_storage_client)
):
    return ApiResponse.from_service(await auth_service.upload_profile_picture(user_id, file, aws_client))
