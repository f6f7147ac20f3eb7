from fastapi import APIRouter, Depends

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.subscription_schemas import SubscriptionPurchaseRequest
from services.dependencies import get_subscription_service
from services.subscription_service import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["Cash Lending Subscription API's"])


@router.get("/plans", summary="Get Cash Lending Plans")
def get_plans(subscription_service: SubscriptionService = Depends(get_subscription_service)):
    return ApiResponse.from_service(subscription_service.list_plans())


@router.get("/me", summary="Get My Active Subscription")
def get_my_subscription(
        user_id: int = Depends(get_current_user_id),
        subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    return ApiResponse.from_service(subscription_service.get_my_subscription(user_id))


@router.post("/purchase", summary="Purchase Cash Lending Subscription")
def purchase_subscription(
        form_data: SubscriptionPurchaseRequest,
        user_id: int = Depends(get_current_user_id),
        subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    return ApiResponse.from_service(subscription_service.purchase(user_id, form_data))
