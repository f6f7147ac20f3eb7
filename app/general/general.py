from fastapi import APIRouter, BackgroundTasks, Depends
from starlette import status

from common.response import ApiResponse
from schemas.enquiry_schemas import EnquiryCreateSchema
from services.bank_partner_service import BankPartnerService
from services.content_service import ContentService
from services.dependencies import get_bank_partner_service, get_content_service, get_enquiry_service
from services.enquiry_service import EnquiryService

router = APIRouter(tags=["General API's"])


@router.get("/bank-partners", summary="Get Active Bank Partners")
def get_bank_partners(partner_service: BankPartnerService = Depends(get_bank_partner_service)):
    return ApiResponse.from_service(partner_service.list_active_partners())


@router.get("/content/{slug}", summary="Get Published Static Content")
def get_content(slug: str, content_service: ContentService = Depends(get_content_service)):
    return ApiResponse.from_service(content_service.get_published_content(slug))


@router.post("/contact", summary="Create a new contact entry")
def create_contact(
        form_data: EnquiryCreateSchema,
        background_tasks: BackgroundTasks,
        enquiry_service: EnquiryService = Depends(get_enquiry_service)
):
    response = enquiry_service.create_enquiry(form_data=form_data, background_tasks=background_tasks)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_201_CREATED),
        data=response.get("data", {})
    )
