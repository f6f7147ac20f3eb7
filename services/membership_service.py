import datetime
from typing import Dict, Any, Optional, Sequence

from dateutil.relativedelta import relativedelta
from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.email_service import EmailService
from common.email_html_utils import build_membership_email_bodies
from common.enums import LoanType, LoanTypeAssociation, MembershipStatus, OrderType
from common.exceptions import AppException, Conflict, Forbidden, NotFound, ValidationError, internal_error_response
from common.utils import format_card_type_response, format_membership_card_response, enum_value
from db_domains import utc_now
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.membership import MembershipCard, MembershipCardType
from models.user import User
from schemas.membership_schemas import MembershipPurchaseRequest, MembershipCardTypeCreate, MembershipCardTypeUpdate
from services.payment_service import PaymentService
from services.razorpay_service import RazorpayService


def compute_expiry(purchase_date: datetime.datetime, validity_months: int) -> datetime.datetime:
    return purchase_date + relativedelta(months=validity_months)


def is_card_active(card: MembershipCard, now: datetime.datetime) -> bool:
    # A card whose expiry has passed is inactive even while its stored status still reads active
    return card.status == MembershipStatus.active and card.expiry_date is not None and card.expiry_date > now


def card_type_supports(card_type: Optional[MembershipCardType], loan_type: LoanType | str) -> bool:
    if card_type is None:
        return False
    association = enum_value(card_type.loan_type_association)
    return association in (LoanTypeAssociation.any.value, enum_value(loan_type))


class MembershipService:
    def __init__(self, database: Database, razorpay_service: Optional[RazorpayService] = None) -> None:
        self.database = database
        self.db_interface = DBInterface(MembershipCard, database)
        self.card_type_interface = DBInterface(MembershipCardType, database)
        self.user_interface = DBInterface(User, database)
        self.razorpay_service = razorpay_service
        self.payment_service = PaymentService(database, razorpay_service)

    # Eligibility
    def get_active_cards(self, user_id: int, now: Optional[datetime.datetime] = None) -> list[MembershipCard]:
        now = now or utc_now()
        cards: Sequence[MembershipCard] = self.db_interface.read_by_fields(
            [MembershipCard.user_id == user_id, MembershipCard.status == MembershipStatus.active]
        )
        return [card for card in cards if is_card_active(card, now)]

    def eligibility_failure(
            self, user_id: int, loan_type: LoanType | str, now: Optional[datetime.datetime] = None
    ) -> Optional[str]:
        """
        Returns None when the user may apply for `loan_type`, otherwise the message key explaining why not.
        """
        active_cards = self.get_active_cards(user_id, now)
        if not active_cards:
            return "active_membership_required"

        supporting_cards = [
            card for card in active_cards
            if card_type_supports(self.card_type_interface.read_by_id(card.card_type_id), loan_type)
        ]
        if not supporting_cards:
            return "card_does_not_support_loan_type"
        if len(supporting_cards) > 1:
            app_logger.error(f"User {user_id} holds {len(supporting_cards)} active membership cards")
            return "multiple_active_memberships"
        return None

    def is_eligible(self, user_id: int, loan_type: LoanType | str, now: Optional[datetime.datetime] = None) -> bool:
        return self.eligibility_failure(user_id, loan_type, now) is None

    def check_loan_eligibility(self, user_id: int, loan_type: LoanType | str) -> None:
        failure = self.eligibility_failure(user_id, loan_type)
        if failure:
            app_logger.info(f"User {user_id} not eligible for {enum_value(loan_type)} loan: {failure}")
            raise Forbidden(failure)

    # Customer operations
    def list_card_types(self) -> Dict[str, Any]:
        try:
            card_types = self.card_type_interface.read_by_fields(
                [MembershipCardType.is_active.is_(True), MembershipCardType.is_deleted.is_(False)],
                order_by=MembershipCardType.price,
            )
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Membership card types"),
                "status_code": status.HTTP_200_OK,
                "data": [format_card_type_response(card_type) for card_type in card_types],
            }
        except Exception as e:
            return internal_error_response("Error fetching membership card types", e)

    def get_my_membership(self, user_id: int) -> Dict[str, Any]:
        try:
            active_cards = self.get_active_cards(user_id)
            if not active_cards:
                raise NotFound("no_active_membership")

            card = max(active_cards, key=lambda item: item.expiry_date)
            card_type = self.card_type_interface.read_by_id(card.card_type_id)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Membership card"),
                "status_code": status.HTTP_200_OK,
                "data": format_membership_card_response(card, card_type),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching membership for user {user_id}", e)

    def expire_stale_cards(self, user_id: int, now: datetime.datetime) -> int:
        stale_cards = [
            card for card in self.db_interface.read_by_fields(
                [MembershipCard.user_id == user_id, MembershipCard.status == MembershipStatus.active]
            )
            if not is_card_active(card, now)
        ]
        for card in stale_cards:
            self.db_interface.update(card.id, {"status": MembershipStatus.expired})
        if stale_cards:
            app_logger.info(f"Marked {len(stale_cards)} stale membership cards expired for user {user_id}")
        return len(stale_cards)

    def purchase(
            self, user_id: int, form_data: MembershipPurchaseRequest, background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        app_logger.info(f"User {user_id} purchasing membership card type {form_data.card_type_id}")
        try:
            now = utc_now()
            if self.get_active_cards(user_id, now):
                raise Conflict("membership_already_active")

            card_type = self.card_type_interface.read_by_id(form_data.card_type_id)
            if not card_type or not card_type.is_active or card_type.is_deleted:
                raise NotFound("not_found", "Membership card type")

            order = self.payment_service.get_payable_order(
                user_id, form_data.razorpay_order_id, OrderType.membership_card, card_type
            )
            if not self.razorpay_service.verify_payment(
                    form_data.razorpay_order_id, form_data.razorpay_payment_id, form_data.razorpay_signature
            ):
                raise ValidationError("payment_verification_failed")
            self.payment_service.ensure_payment_unused(form_data.razorpay_payment_id)

            self.expire_stale_cards(user_id, now)
            try:
                card = self.db_interface.create(
                    {
                        "user_id": user_id,
                        "card_type_id": card_type.id,
                        "purchase_date": now,
                        "expiry_date": compute_expiry(now, card_type.validity_months),
                        "payment_id": form_data.razorpay_payment_id,
                        "status": MembershipStatus.active,
                    }
                )
            except IntegrityError:
                # A concurrent purchase won the active-card index or the payment id
                app_logger.warning(f"Membership purchase for user {user_id} lost a uniqueness race")
                if self.get_active_cards(user_id):
                    raise Conflict("membership_already_active")
                raise Conflict("payment_already_used")
            self.payment_service.mark_paid(order, form_data.razorpay_payment_id)
            app_logger.info(f"Membership card {card.id} issued to user {user_id} until {card.expiry_date}")

            user = self.user_interface.read_by_id(user_id)
            if background_tasks is not None and user and user.email:
                subject, plain_body, html_body = build_membership_email_bodies(card, card_type, user)
                background_tasks.add_task(EmailService().send_email, subject, plain_body, user.email, html_body)

            return {
                "success": True,
                "message": gettext("created_successfully").format("Membership card"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_membership_card_response(card, card_type),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error purchasing membership for user {user_id}", e)

    # Admin operations
    def list_all_card_types(self) -> Dict[str, Any]:
        try:
            card_types = self.card_type_interface.read_by_fields(
                [MembershipCardType.is_deleted.is_(False)], order_by=MembershipCardType.id
            )
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Membership card types"),
                "status_code": status.HTTP_200_OK,
                "data": [format_card_type_response(card_type) for card_type in card_types],
            }
        except Exception as e:
            return internal_error_response("Error fetching membership card types", e)

    def create_card_type(self, admin_id: int, form_data: MembershipCardTypeCreate) -> Dict[str, Any]:
        try:
            if self.card_type_interface.read_single_by_fields([MembershipCardType.name == form_data.name]):
                raise Conflict("already_exists", "Membership card type")

            card_type = self.card_type_interface.create(
                {**form_data.model_dump(), "created_by": admin_id, "modified_by": admin_id}
            )
            app_logger.info(f"Admin {admin_id} created membership card type {card_type.id}")
            return {
                "success": True,
                "message": gettext("created_successfully").format("Membership card type"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_card_type_response(card_type),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error creating membership card type", e)

    def update_card_type(self, admin_id: int, card_type_id: int, form_data: MembershipCardTypeUpdate) -> Dict[str, Any]:
        try:
            card_type = self.card_type_interface.read_by_id(card_type_id)
            if not card_type or card_type.is_deleted:
                raise NotFound("not_found", "Membership card type")

            update_data = form_data.model_dump(exclude_none=True)
            if "name" in update_data and self.card_type_interface.read_single_by_fields(
                    [MembershipCardType.name == update_data["name"], MembershipCardType.id != card_type_id]
            ):
                raise Conflict("already_exists", "Membership card type")

            card_type = self.card_type_interface.update(card_type_id, {**update_data, "modified_by": admin_id})
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Membership card type"),
                "status_code": status.HTTP_200_OK,
                "data": format_card_type_response(card_type),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating membership card type {card_type_id}", e)

    def delete_card_type(self, admin_id: int, card_type_id: int) -> Dict[str, Any]:
        try:
            if not self.card_type_interface.soft_delete(
                    [MembershipCardType.id == card_type_id, MembershipCardType.is_deleted.is_(False)], admin_id
            ):
                raise NotFound("not_found", "Membership card type")
            return {
                "success": True,
                "message": gettext("deleted_successfully").format("Membership card type"),
                "status_code": status.HTTP_200_OK,
                "data": {},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error deleting membership card type {card_type_id}", e)
