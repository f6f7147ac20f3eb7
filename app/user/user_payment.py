from fastapi import APIRouter, Depends
from starlette import status

from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.payment_schemas import CreateOrderRequest
from services.dependencies import get_payment_service
from services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["RazorPay API's"])


@router.post("/create-order", summary="Create Razorpay Order")
def create_order(
        form_data: CreateOrderRequest,
        user_id: int = Depends(get_current_user_id),
        service: PaymentService = Depends(get_payment_service)
):
    response = service.create_order(user_id, form_data)
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_201_CREATED),
        data=response.get("data")
    )
