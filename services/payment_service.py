from typing import Dict, Any, Optional

from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.enums import OrderType, PaymentOrderStatus
from common.exceptions import AppException, Conflict, InternalError, NotFound, ValidationError, internal_error_response
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.membership import MembershipCardType
from models.payment import PaymentOrder
from models.subscription import CashLendingSubscriptionPlan
from schemas.payment_schemas import CreateOrderRequest
from services.razorpay_service import RazorpayService

ORDER_ITEMS = {
    OrderType.membership_card: (MembershipCardType, "Membership card type"),
    OrderType.cash_lending_subscription: (CashLendingSubscriptionPlan, "Subscription plan"),
}


def price_in_paise(price: float) -> int:
    return int(round(price * 100))


class PaymentService:
    def __init__(self, database: Database, razorpay_service: Optional[RazorpayService] = None) -> None:
        self.database = database
        self.razorpay_service = razorpay_service
        self.order_interface = DBInterface(PaymentOrder, database)

    def create_order(self, user_id: int, form_data: CreateOrderRequest) -> Dict[str, Any]:
        try:
            model, label = ORDER_ITEMS[form_data.type]
            item = DBInterface(model, self.database).read_by_id(form_data.item_id)
            if not item or not item.is_active or item.is_deleted:
                raise NotFound("not_found", label)

            if not self.razorpay_service or not self.razorpay_service.is_configured:
                raise InternalError("payment_gateway_unavailable")

            amount_in_paise = price_in_paise(item.price)
            order = self.razorpay_service.create_order(
                amount_in_paise=amount_in_paise,
                receipt=f"{form_data.type.value}_{item.id}_{user_id}",
                notes={"type": form_data.type.value, "item_id": str(item.id), "user_id": str(user_id)},
            )
            self.order_interface.create(
                {
                    "razorpay_order_id": order.get("id"),
                    "user_id": user_id,
                    "order_type": form_data.type,
                    "item_id": item.id,
                    "amount": amount_in_paise,
                    "currency": order.get("currency", "INR"),
                    "status": PaymentOrderStatus.created,
                }
            )
            app_logger.info(f"Order {order.get('id')} created for user {user_id} ({form_data.type.value} {item.id})")
            return {
                "success": True,
                "message": gettext("order_created"),
                "status_code": status.HTTP_201_CREATED,
                "data": {
                    "order_id": order.get("id"),
                    "amount": order.get("amount", amount_in_paise),
                    "currency": order.get("currency", "INR"),
                    "key_id": self.razorpay_service.key_id,
                },
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error creating payment order for user {user_id}", e)

    def get_payable_order(self, user_id: int, razorpay_order_id: str, order_type: OrderType, item) -> PaymentOrder:
        """
        Returns the unpaid order this user opened for exactly this item at its current price.
        Raises ValidationError when the order belongs to someone or something else, Conflict once it is paid.
        """
        order: Optional[PaymentOrder] = self.order_interface.read_single_by_fields(
            [PaymentOrder.razorpay_order_id == razorpay_order_id]
        )
        if (
                not order
                or order.user_id != user_id
                or order.order_type != order_type
                or order.item_id != item.id
                or order.amount != price_in_paise(item.price)
        ):
            app_logger.warning(f"Order {razorpay_order_id} does not match {order_type.value} {item.id} for user {user_id}")
            raise ValidationError("payment_order_mismatch")
        if order.status != PaymentOrderStatus.created:
            raise Conflict("payment_already_used")
        return order

    def mark_paid(self, order: PaymentOrder, payment_id: str) -> None:
        self.order_interface.update(order.id, {"status": PaymentOrderStatus.paid, "payment_id": payment_id})
        app_logger.info(f"Order {order.razorpay_order_id} settled by payment {payment_id}")

    def ensure_payment_unused(self, payment_id: str) -> None:
        # One captured payment settles one order, whatever item it was for
        if self.order_interface.read_single_by_fields([PaymentOrder.payment_id == payment_id]):
            app_logger.warning(f"Payment {payment_id} presented again")
            raise Conflict("payment_already_used")
