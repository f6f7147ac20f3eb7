from typing import Dict, Any, Optional

from fastapi import BackgroundTasks
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.email_service import EmailService
from common.email_html_utils import build_loan_email_bodies
from common.enums import LoanStatus, LoanAction
from common.exceptions import AppException, Forbidden, NotFound, InvalidStateTransition, internal_error_response
from common.utils import format_loan_response, enum_value
from config import app_config
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.loan import LoanApplication
from models.user import User
from schemas.loan_schemas import LoanForm, UpdateLoanForm
from services.loan_service.lifecycle import next_status, can_transition, allowed_actions
from services.membership_service import MembershipService


def serialize_documents(documents: Optional[dict]) -> dict:
    return {enum_value(doc_type): key for doc_type, key in (documents or {}).items()}


class UserLoanService:
    def __init__(self, database: Database, membership_service: Optional[MembershipService] = None) -> None:
        self.database = database
        self.db_interface = DBInterface(LoanApplication, database)
        self.user_interface = DBInterface(User, database)
        self.membership_service = membership_service or MembershipService(database)

    def get_loan(self, loan_id: int) -> LoanApplication:
        loan = self.db_interface.read_by_id(loan_id)
        if not loan or loan.is_deleted:
            raise NotFound("not_found", "Loan application")
        return loan

    def get_owned_loan(self, user_id: int, loan_id: int) -> LoanApplication:
        loan = self.get_loan(loan_id)
        # Another user's application is reported exactly like a missing one
        if loan.user_id != user_id:
            raise NotFound("not_found", "Loan application")
        return loan

    def transition(self, loan: LoanApplication, action: LoanAction, data: Optional[dict] = None) -> LoanApplication:
        """
        Move `loan` along the lifecycle. The write only lands while the stored status still equals the status the
        decision was made on; a concurrent change makes this call fail instead of overwriting the other writer.
        """
        current_status = LoanStatus(enum_value(loan.status))
        target_status = next_status(current_status, action)

        updated = self.db_interface.update_where(
            loan.id, {"status": current_status}, {**(data or {}), "status": target_status}
        )
        if updated is None:
            app_logger.warning(f"Loan {loan.id} changed status concurrently, '{action.value}' not applied")
            raise InvalidStateTransition("concurrent_status_change")

        app_logger.info(
            f"Loan {loan.id} ({loan.application_uid}) {action.value}: {current_status.value} -> {target_status.value}"
        )
        return updated

    def _notify_admin_new_application(self, loan: LoanApplication, applicant: User,
                                      background_tasks: Optional[BackgroundTasks]) -> None:
        recipient = app_config.RECIPIENT_ADMIN_EMAIL
        if background_tasks is None or not recipient or str(app_config.IS_PROD).lower() != "true":
            return
        try:
            plain_body, html_body = build_loan_email_bodies(loan, applicant)
            background_tasks.add_task(
                EmailService().send_email, "New Loan Application Submitted", plain_body, recipient, html_body
            )
        except Exception as e:
            app_logger.error(f"Error scheduling email for loan {loan.application_uid}: {str(e)}")

    def add_loan_application(
            self, user_id: int, loan_application_form: LoanForm, background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        try:
            app_logger.info(f"User {user_id} initiated {loan_application_form.loan_type.value} loan application.")

            applicant = self.user_interface.read_by_id(user_id)
            if not applicant or applicant.is_deleted:
                raise NotFound("not_found", "User")

            self.membership_service.check_loan_eligibility(user_id, loan_application_form.loan_type)

            loan = self.db_interface.create(
                {
                    "user_id": user_id,
                    "loan_type": loan_application_form.loan_type,
                    "amount_requested": loan_application_form.amount_requested,
                    "tenure_months_requested": loan_application_form.tenure_months_requested,
                    "interest_rate_proposed": loan_application_form.interest_rate_proposed,
                    "purpose": loan_application_form.purpose,
                    "documents_submitted": serialize_documents(loan_application_form.documents_submitted),
                    "status": LoanStatus.submitted,
                }
            )
            app_logger.info(f"Loan application {loan.application_uid} created for user {user_id}")

            self._notify_admin_new_application(loan, applicant, background_tasks)

            return {
                "success": True,
                "message": gettext("loan_application_submitted"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error adding loan application for user {user_id}", e)

    def get_loan_applications(self, user_id: int, status_filter: Optional[LoanStatus] = None) -> Dict[str, Any]:
        try:
            app_logger.info(f"Fetching all loan applications for user: {user_id}")
            filters = [LoanApplication.user_id == user_id, LoanApplication.is_deleted.is_(False)]
            if status_filter is not None:
                filters.append(LoanApplication.status == status_filter)

            loans = self.db_interface.read_by_fields(filters, order_by=LoanApplication.id.desc())
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Loan applications"),
                "status_code": status.HTTP_200_OK,
                "data": [format_loan_response(loan) for loan in loans],
            }
        except Exception as e:
            return internal_error_response(f"Error fetching loan applications for user {user_id}", e)

    def get_loan_application_details(self, user_id: int, loan_id: int) -> Dict[str, Any]:
        try:
            loan = self.get_owned_loan(user_id, loan_id)
            data = format_loan_response(loan)
            data["allowed_actions"] = [
                action.value for action in allowed_actions(loan.status)
                if action in (LoanAction.update, LoanAction.cancel)
            ]
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Loan application"),
                "status_code": status.HTTP_200_OK,
                "data": data,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching loan {loan_id} for user {user_id}", e)

    def update_loan_application(self, user_id: int, loan_id: int, form_data: UpdateLoanForm) -> Dict[str, Any]:
        try:
            loan = self.get_owned_loan(user_id, loan_id)
            if not can_transition(loan.status, LoanAction.update):
                raise Forbidden("loan_not_editable")

            update_data = form_data.model_dump(exclude_none=True, exclude={"documents_submitted"})
            if form_data.documents_submitted is not None:
                update_data["documents_submitted"] = {
                    **(loan.documents_submitted or {}), **serialize_documents(form_data.documents_submitted)
                }

            loan = self.transition(loan, LoanAction.update, update_data)
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Loan application"),
                "status_code": status.HTTP_200_OK,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating loan {loan_id} for user {user_id}", e)

    def attach_document(self, user_id: int, loan_id: int, document_type: str, storage_key: str) -> LoanApplication:
        loan = self.get_owned_loan(user_id, loan_id)
        if not can_transition(loan.status, LoanAction.update):
            raise Forbidden("loan_not_editable")
        documents = {**(loan.documents_submitted or {}), document_type: storage_key}
        return self.transition(loan, LoanAction.update, {"documents_submitted": documents})

    def cancel_loan_application(self, user_id: int, loan_id: int) -> Dict[str, Any]:
        try:
            loan = self.get_owned_loan(user_id, loan_id)
            loan = self.transition(loan, LoanAction.cancel)
            return {
                "success": True,
                "message": gettext("cancelled_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error cancelling loan {loan_id} for user {user_id}", e)
