from typing import Optional

from fastapi import APIRouter, Depends, Query

from common.enums import EnquiryStatus
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_admin_id
from schemas.content_schemas import StaticContentUpsert
from schemas.enquiry_schemas import EnquiryStatusUpdateSchema
from services.content_service import ContentService
from services.dependencies import get_content_service, get_enquiry_service
from services.enquiry_service import EnquiryService

router = APIRouter(prefix="/admin", tags=["Admin Content & Enquiry API's"])


@router.put("/content/{slug}", summary="Create Or Update Static Content")
def upsert_content(
        slug: str,
        form_data: StaticContentUpsert,
        admin_id: int = Depends(get_current_admin_id),
        content_service: ContentService = Depends(get_content_service)
):
    return ApiResponse.from_service(content_service.upsert_content(admin_id, slug, form_data))


@router.get("/enquiries", summary="Get All Enquiries")
def get_all_enquiries(
        search: Optional[str] = Query(None, description="Search text for name, email, subject"),
        status_filter: Optional[EnquiryStatus] = Query(None, description="Filter by Enquiry Status"),
        start_date: Optional[str] = Query(None, description="Start Date for Range Filter (YYYY-MM-DD)"),
        end_date: Optional[str] = Query(None, description="End Date for Range Filter (YYYY-MM-DD)"),
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
        enquiry_service: EnquiryService = Depends(get_enquiry_service)
):
    response = enquiry_service.get_all_enquiries(
        search=search, status_filter=status_filter, start_date=start_date, end_date=end_date, page=page, limit=limit
    )
    return ApiResponse.from_service(response)


@router.put("/enquiries/{enquiry_id}/status", summary="Update Enquiry Status")
def update_enquiry_status(
        enquiry_id: int,
        form_data: EnquiryStatusUpdateSchema,
        enquiry_service: EnquiryService = Depends(get_enquiry_service)
):
    return ApiResponse.from_service(enquiry_service.update_status(enquiry_id, form_data))
