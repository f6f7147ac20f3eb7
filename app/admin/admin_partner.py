from typing import Optional

from fastapi import APIRouter, Depends, Query

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_admin_id
from schemas.partner_schemas import BankPartnerCreate, BankPartnerUpdate
from services.bank_partner_service import BankPartnerService
from services.dependencies import get_bank_partner_service

router = APIRouter(prefix="/admin/partners", tags=["Admin Bank Partner API's"])


@router.get("", summary="Get All Bank Partners")
def get_all_partners(
        search: Optional[str] = Query(None, description="Search text for partner or contact name, email"),
        is_active: Optional[bool] = Query(None, description="Filter by Active Status"),
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
        partner_service: BankPartnerService = Depends(get_bank_partner_service)
):
    response = partner_service.get_all_partners(search=search, is_active=is_active, page=page, limit=limit)
    return ApiResponse.from_service(response)


@router.post("", summary="Create Bank Partner")
def create_partner(
        form_data: BankPartnerCreate,
        admin_id: int = Depends(get_current_admin_id),
        partner_service: BankPartnerService = Depends(get_bank_partner_service)
):
    return ApiResponse.from_service(partner_service.create_partner(admin_id, form_data))


@router.get("/{partner_id}", summary="Get Bank Partner Details")
def get_partner_details(partner_id: int, partner_service: BankPartnerService = Depends(get_bank_partner_service)):
    return ApiResponse.from_service(partner_service.get_partner_details(partner_id))


@router.put("/{partner_id}", summary="Update Bank Partner")
def update_partner(
        partner_id: int,
        form_data: BankPartnerUpdate,
        admin_id: int = Depends(get_current_admin_id),
        partner_service: BankPartnerService = Depends(get_bank_partner_service)
):
    return ApiResponse.from_service(partner_service.update_partner(admin_id, partner_id, form_data))


@router.post("/{partner_id}/toggle-status", summary="Toggle Bank Partner Status")
def toggle_partner_status(
        partner_id: int,
        admin_id: int = Depends(get_current_admin_id),
        partner_service: BankPartnerService = Depends(get_bank_partner_service)
):
    return ApiResponse.from_service(partner_service.toggle_status(admin_id, partner_id))


@router.delete("/{partner_id}", summary="Delete Bank Partner")
def delete_partner(
        partner_id: int,
        admin_id: int = Depends(get_current_admin_id),
        partner_service: BankPartnerService = Depends(get_bank_partner_service)
):
    return ApiResponse.from_service(partner_service.delete_partner(admin_id, partner_id))
