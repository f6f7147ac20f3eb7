from fastapi import APIRouter, Depends

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_admin_id
from schemas.membership_schemas import MembershipCardTypeCreate, MembershipCardTypeUpdate
from schemas.subscription_schemas import SubscriptionPlanCreate, SubscriptionPlanUpdate
from services.dependencies import get_membership_service, get_subscription_service
from services.membership_service import MembershipService
from services.subscription_service import SubscriptionService

router = APIRouter(prefix="/admin", tags=["Admin Membership & Plan API's"])


@router.get("/membership-types", summary="Get All Membership Card Types")
def get_card_types(membership_service: MembershipService = Depends(get_membership_service)):
    return ApiResponse.from_service(membership_service.list_all_card_types())


@router.post("/membership-types", summary="Create Membership Card Type")
def create_card_type(
        form_data: MembershipCardTypeCreate,
        admin_id: int = Depends(get_current_admin_id),
        membership_service: MembershipService = Depends(get_membership_service)
):
    return ApiResponse.from_service(membership_service.create_card_type(admin_id, form_data))


@router.put("/membership-types/{card_type_id}", summary="Update Membership Card Type")
def update_card_type(
        card_type_id: int,
        form_data: MembershipCardTypeUpdate,
        admin_id: int = Depends(get_current_admin_id),
        membership_service: MembershipService = Depends(get_membership_service)
):
    return ApiResponse.from_service(membership_service.update_card_type(admin_id, card_type_id, form_data))


@router.delete("/membership-types/{card_type_id}", summary="Delete Membership Card Type")
def delete_card_type(
        card_type_id: int,
        admin_id: int = Depends(get_current_admin_id),
        membership_service: MembershipService = Depends(get_membership_service)
):
    return ApiResponse.from_service(membership_service.delete_card_type(admin_id, card_type_id))


@router.get("/subscription-plans", summary="Get All Cash Lending Plans")
def get_plans(subscription_service: SubscriptionService = Depends(get_subscription_service)):
    return ApiResponse.from_service(subscription_service.list_plans(include_inactive=True))


@router.post("/subscription-plans", summary="Create Cash Lending Plan")
def create_plan(
        form_data: SubscriptionPlanCreate,
        admin_id: int = Depends(get_current_admin_id),
        subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    return ApiResponse.from_service(subscription_service.create_plan(admin_id, form_data))


@router.put("/subscription-plans/{plan_id}", summary="Update Cash Lending Plan")
def update_plan(
        plan_id: int,
        form_data: SubscriptionPlanUpdate,
        admin_id: int = Depends(get_current_admin_id),
        subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    return ApiResponse.from_service(subscription_service.update_plan(admin_id, plan_id, form_data))


@router.delete("/subscription-plans/{plan_id}", summary="Delete Cash Lending Plan")
def delete_plan(
        plan_id: int,
        admin_id: int = Depends(get_current_admin_id),
        subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    return ApiResponse.from_service(subscription_service.delete_plan(admin_id, plan_id))
