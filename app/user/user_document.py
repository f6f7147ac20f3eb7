from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from common.enums import DocumentType, UserType
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user
from services.dependencies import get_document_service
from services.document_service import DocumentService

router = APIRouter(prefix="/documents", tags=["Document API's"])


@router.post("/upload", summary="Upload KYC Document")
async def upload_document(
        document_type: DocumentType = Form(...),
        loan_id: Optional[int] = Form(None),
        file: UploadFile = File(...),
        user: dict = Depends(get_current_user),
        document_service: DocumentService = Depends(get_document_service)
):
    response = await document_service.upload_document(
        user_id=int(user["userId"]), document_type=document_type, file=file, loan_id=loan_id
    )
    return ApiResponse.from_service(response)


@router.get("/presigned-url", summary="Get Presigned Download URL")
async def get_presigned_url(
        key: str = Query(..., description="Storage key returned by the upload endpoint"),
        user: dict = Depends(get_current_user),
        document_service: DocumentService = Depends(get_document_service)
):
    response = await document_service.get_presigned_url(
        user_id=int(user["userId"]), key=key, is_admin=user.get("userType") == UserType.admin.value
    )
    return ApiResponse.from_service(response)
