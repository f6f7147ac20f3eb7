from fastapi import APIRouter, BackgroundTasks, Depends

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.membership_schemas import MembershipPurchaseRequest
from services.dependencies import get_membership_service
from services.membership_service import MembershipService

router = APIRouter(prefix="/memberships", tags=["Membership API's"])


@router.get("/types", summary="Get Available Membership Card Types")
def get_card_types(membership_service: MembershipService = Depends(get_membership_service)):
    return ApiResponse.from_service(membership_service.list_card_types())


@router.get("/me", summary="Get My Active Membership")
def get_my_membership(
        user_id: int = Depends(get_current_user_id),
        membership_service: MembershipService = Depends(get_membership_service)
):
    return ApiResponse.from_service(membership_service.get_my_membership(user_id))


@router.post("/purchase", summary="Purchase Membership Card")
def purchase_membership(
        form_data: MembershipPurchaseRequest,
        background_tasks: BackgroundTasks,
        user_id: int = Depends(get_current_user_id),
        membership_service: MembershipService = Depends(get_membership_service)
):
    response = membership_service.purchase(user_id, form_data, background_tasks=background_tasks)
    return ApiResponse.from_service(response)
