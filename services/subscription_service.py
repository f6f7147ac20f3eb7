import datetime
from typing import Dict, Any, Optional

from sqlalchemy.exc import IntegrityError
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.enums import OrderType, SubscriptionStatus, UserType
from common.exceptions import AppException, Conflict, NotFound, ValidationError, internal_error_response
from common.utils import format_model_response
from db_domains import utc_now
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.subscription import CashLendingSubscription, CashLendingSubscriptionPlan
from models.user import User
from schemas.subscription_schemas import SubscriptionPurchaseRequest, SubscriptionPlanCreate, SubscriptionPlanUpdate
from services.payment_service import PaymentService
from services.razorpay_service import RazorpayService


def is_subscription_active(subscription: CashLendingSubscription, now: datetime.datetime) -> bool:
    return subscription.status == SubscriptionStatus.active and subscription.end_date > now


class SubscriptionService:
    def __init__(self, database: Database, razorpay_service: Optional[RazorpayService] = None) -> None:
        self.database = database
        self.db_interface = DBInterface(CashLendingSubscription, database)
        self.plan_interface = DBInterface(CashLendingSubscriptionPlan, database)
        self.user_interface = DBInterface(User, database)
        self.razorpay_service = razorpay_service
        self.payment_service = PaymentService(database, razorpay_service)

    def get_active_subscription(self, user_id: int, now: Optional[datetime.datetime] = None):
        now = now or utc_now()
        subscriptions = self.db_interface.read_by_fields(
            [CashLendingSubscription.user_id == user_id, CashLendingSubscription.status == SubscriptionStatus.active],
            order_by=CashLendingSubscription.end_date.desc(),
        )
        return next((item for item in subscriptions if is_subscription_active(item, now)), None)

    def list_plans(self, include_inactive: bool = False) -> Dict[str, Any]:
        try:
            filters = [CashLendingSubscriptionPlan.is_deleted.is_(False)]
            if not include_inactive:
                filters.append(CashLendingSubscriptionPlan.is_active.is_(True))
            plans = self.plan_interface.read_by_fields(filters, order_by=CashLendingSubscriptionPlan.price)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Subscription plans"),
                "status_code": status.HTTP_200_OK,
                "data": [format_model_response(plan) for plan in plans],
            }
        except Exception as e:
            return internal_error_response("Error fetching subscription plans", e)

    def get_my_subscription(self, user_id: int) -> Dict[str, Any]:
        try:
            subscription = self.get_active_subscription(user_id)
            if not subscription:
                raise NotFound("no_active_subscription")

            data = format_model_response(subscription)
            data["plan"] = format_model_response(self.plan_interface.read_by_id(subscription.plan_id))
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Subscription"),
                "status_code": status.HTTP_200_OK,
                "data": data,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching subscription for user {user_id}", e)

    def purchase(self, user_id: int, form_data: SubscriptionPurchaseRequest) -> Dict[str, Any]:
        app_logger.info(f"User {user_id} purchasing cash lending plan {form_data.plan_id}")
        try:
            now = utc_now()
            if self.get_active_subscription(user_id, now):
                raise Conflict("subscription_already_active")

            plan = self.plan_interface.read_by_id(form_data.plan_id)
            if not plan or not plan.is_active or plan.is_deleted:
                raise NotFound("not_found", "Subscription plan")

            order = self.payment_service.get_payable_order(
                user_id, form_data.razorpay_order_id, OrderType.cash_lending_subscription, plan
            )
            if not self.razorpay_service.verify_payment(
                    form_data.razorpay_order_id, form_data.razorpay_payment_id, form_data.razorpay_signature
            ):
                raise ValidationError("payment_verification_failed")
            self.payment_service.ensure_payment_unused(form_data.razorpay_payment_id)

            try:
                subscription = self.db_interface.create(
                    {
                        "user_id": user_id,
                        "plan_id": plan.id,
                        "start_date": now,
                        "end_date": now + datetime.timedelta(days=plan.duration_days),
                        "payment_id": form_data.razorpay_payment_id,
                        "status": SubscriptionStatus.active,
                    }
                )
            except IntegrityError:
                app_logger.warning(f"Payment {form_data.razorpay_payment_id} already redeemed by another subscription")
                raise Conflict("payment_already_used")
            self.payment_service.mark_paid(order, form_data.razorpay_payment_id)
            self.user_interface.update(user_id, {"user_type": UserType.cash_lending_customer})
            app_logger.info(f"Subscription {subscription.id} active for user {user_id} until {subscription.end_date}")

            return {
                "success": True,
                "message": gettext("created_successfully").format("Subscription"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_model_response(subscription),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error purchasing subscription for user {user_id}", e)

    # Admin operations
    def create_plan(self, admin_id: int, form_data: SubscriptionPlanCreate) -> Dict[str, Any]:
        try:
            if self.plan_interface.read_single_by_fields([CashLendingSubscriptionPlan.name == form_data.name]):
                raise Conflict("already_exists", "Subscription plan")

            plan = self.plan_interface.create({**form_data.model_dump(), "created_by": admin_id, "modified_by": admin_id})
            return {
                "success": True,
                "message": gettext("created_successfully").format("Subscription plan"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_model_response(plan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error creating subscription plan", e)

    def update_plan(self, admin_id: int, plan_id: int, form_data: SubscriptionPlanUpdate) -> Dict[str, Any]:
        try:
            plan = self.plan_interface.read_by_id(plan_id)
            if not plan or plan.is_deleted:
                raise NotFound("not_found", "Subscription plan")

            update_data = form_data.model_dump(exclude_none=True)
            if "name" in update_data and self.plan_interface.read_single_by_fields(
                    [CashLendingSubscriptionPlan.name == update_data["name"], CashLendingSubscriptionPlan.id != plan_id]
            ):
                raise Conflict("already_exists", "Subscription plan")

            plan = self.plan_interface.update(plan_id, {**update_data, "modified_by": admin_id})
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Subscription plan"),
                "status_code": status.HTTP_200_OK,
                "data": format_model_response(plan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating subscription plan {plan_id}", e)

    def delete_plan(self, admin_id: int, plan_id: int) -> Dict[str, Any]:
        try:
            if not self.plan_interface.soft_delete(
                    [CashLendingSubscriptionPlan.id == plan_id, CashLendingSubscriptionPlan.is_deleted.is_(False)],
                    admin_id
            ):
                raise NotFound("not_found", "Subscription plan")
            return {
                "success": True,
                "message": gettext("deleted_successfully").format("Subscription plan"),
                "status_code": status.HTTP_200_OK,
                "data": {},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error deleting subscription plan {plan_id}", e)
