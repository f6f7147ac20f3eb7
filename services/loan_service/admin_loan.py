from datetime import datetime, timedelta
from typing import Dict, Any, Optional

from fastapi import BackgroundTasks
from sqlalchemy import select, or_
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.email_service import EmailService
from common.common_services.sms_service import SMSService
from common.email_html_utils import build_loan_decision_email_bodies
from common.enums import LoanStatus, LoanAction
from common.exceptions import AppException, NotFound, ValidationError, internal_error_response
from common.message_template import get_loan_approval_message, get_loan_rejection_message
from common.utils import format_loan_response, format_user_summary, pagination_meta
from db_domains import utc_now
from db_domains.db_interface import DBInterface
from models.bank_partner import BankPartner
from models.loan import LoanApplication
from models.user import User
from schemas.loan_schemas import LoanApprovalForm, LoanRejectionForm, LoanStatusUpdateForm
from services.loan_service.lifecycle import allowed_actions
from services.loan_service.user_loan import UserLoanService

DATE_FORMAT = "%Y-%m-%d"


def parse_date_range(start_date: Optional[str], end_date: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    try:
        start = datetime.strptime(start_date, DATE_FORMAT) if start_date else None
        end = (
            datetime.strptime(end_date, DATE_FORMAT) + timedelta(days=1) - timedelta(seconds=1)
        ) if end_date else None
    except ValueError:
        raise ValidationError("invalid_date_format")
    if start and end and start > end:
        raise ValidationError("invalid_date_range")
    return start, end


def notify_loan_decision(loan: LoanApplication, applicant: User, approved: bool) -> None:
    """Best-effort: a failed notification never touches the already persisted decision."""
    try:
        if applicant.email:
            subject, plain_body, html_body = build_loan_decision_email_bodies(loan, applicant, approved)
            EmailService().send_email(subject, plain_body, applicant.email, html_body)
        else:
            message = (
                get_loan_approval_message(loan.application_uid, loan.amount_approved) if approved
                else get_loan_rejection_message(loan.application_uid, loan.rejection_reason or "")
            )
            SMSService.send_sms(applicant.phone_number, message)
    except Exception as e:
        app_logger.exception(f"Failed to notify applicant of loan {loan.application_uid}: {e}")


class AdminLoanService(UserLoanService):

    def get_all_loans(
            self, search: Optional[str] = None, status_filter: Optional[LoanStatus] = None,
            order_by: Optional[str] = None, order_direction: Optional[str] = None, page: int = 1, limit: int = 10,
            start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            app_logger.info("Fetching all loan applications")

            filter_def = {
                "AND": [
                    {"field": "is_deleted", "op": "==", "value": False}
                ]
            }

            if status_filter:
                filter_def["AND"].append({"field": "status", "op": "==", "value": status_filter})

            start, end = parse_date_range(start_date, end_date)
            if start:
                filter_def["AND"].append({"field": "application_date", "op": ">=", "value": start})
            if end:
                filter_def["AND"].append({"field": "application_date", "op": "<=", "value": end})

            # Search filter
            if search and search.strip() != "":
                like_value = f"%{search.strip().lower()}%"
                matching_users = select(User.id).where(
                    or_(User.full_name.ilike(like_value), User.email.ilike(like_value),
                        User.phone_number.ilike(like_value))
                )
                filter_def["AND"].append(
                    {
                        "OR": [
                            {"field": "application_uid", "op": "ilike", "value": like_value},
                            {"field": "user_id", "op": "in", "value": matching_users},
                        ]
                    }
                )

            filter_expr = self.db_interface.build_filter_expression(filter_def)

            order_column = getattr(
                LoanApplication, order_by, LoanApplication.application_date
            ) if order_by else LoanApplication.application_date
            order_direction = order_direction.lower() if order_direction else "desc"

            loans, total_count = self.db_interface.read_all_by_filters(
                filter_expr=filter_expr,
                order_by=order_column,
                order_direction=order_direction,
                limit=limit,
                offset=(page - 1) * limit
            )

            applicants = {
                user.id: user for user in self.user_interface.read_by_fields(
                    [User.id.in_({loan.user_id for loan in loans})]
                )
            } if loans else {}

            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Loan applications"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    "loan_applications": [format_loan_response(loan, applicants.get(loan.user_id)) for loan in loans],
                    "pagination": pagination_meta(total_count, page, limit),
                }
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error retrieving loans", e)

    def get_admin_loan_details(self, loan_id: int) -> Dict[str, Any]:
        try:
            loan = self.get_loan(loan_id)
            applicant = self.user_interface.read_by_id(loan.user_id)
            data = format_loan_response(loan, applicant)
            data["allowed_actions"] = [action.value for action in allowed_actions(loan.status)]
            if applicant:
                active_cards = self.membership_service.get_active_cards(applicant.id)
                data["applicant"]["has_active_membership"] = bool(active_cards)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Loan application"),
                "status_code": status.HTTP_200_OK,
                "data": data,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching loan {loan_id}", e)

    def _schedule_decision_notice(self, loan: LoanApplication, approved: bool,
                                  background_tasks: Optional[BackgroundTasks]) -> None:
        applicant = self.user_interface.read_by_id(loan.user_id)
        if background_tasks is None or applicant is None:
            return
        background_tasks.add_task(notify_loan_decision, loan, applicant, approved)

    def approve_loan(
            self, admin_id: int, loan_id: int, form_data: LoanApprovalForm,
            background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        try:
            loan = self.get_loan(loan_id)
            loan = self.transition(
                loan, LoanAction.approve,
                {
                    "amount_approved": form_data.approved_amount,
                    "interest_rate_final": form_data.interest_rate,
                    "tenure_months_final": form_data.tenure_months,
                    "processing_fee": form_data.processing_fee,
                    "admin_remarks": form_data.remarks,
                    "approved_date": utc_now(),
                }
            )
            app_logger.info(f"Admin {admin_id} approved loan {loan.application_uid} for {loan.amount_approved}")
            self._schedule_decision_notice(loan, True, background_tasks)
            return {
                "success": True,
                "message": gettext("approved_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error approving loan {loan_id}", e)

    def reject_loan(
            self, admin_id: int, loan_id: int, form_data: LoanRejectionForm,
            background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        try:
            loan = self.get_loan(loan_id)
            loan = self.transition(
                loan, LoanAction.reject,
                {"rejection_reason": form_data.reason, "admin_remarks": form_data.remarks}
            )
            app_logger.info(f"Admin {admin_id} rejected loan {loan.application_uid}")
            self._schedule_decision_notice(loan, False, background_tasks)
            return {
                "success": True,
                "message": gettext("rejected_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error rejecting loan {loan_id}", e)

    def update_loan_status(self, admin_id: int, loan_id: int, form_data: LoanStatusUpdateForm) -> Dict[str, Any]:
        try:
            loan = self.get_loan(loan_id)
            data = {}
            if form_data.remarks:
                data["admin_remarks"] = form_data.remarks

            if form_data.action == LoanAction.disburse:
                data["disbursed_date"] = utc_now()
                if form_data.bank_partner_id is not None:
                    partner = DBInterface(BankPartner, self.database).read_by_id(form_data.bank_partner_id)
                    if not partner or not partner.is_active or partner.is_deleted:
                        raise NotFound("not_found", "Bank partner")
                    data["bank_partner_id"] = partner.id
            elif form_data.action == LoanAction.close:
                data["closed_date"] = utc_now()

            loan = self.transition(loan, form_data.action, data)
            app_logger.info(f"Admin {admin_id} applied '{form_data.action.value}' to loan {loan.application_uid}")
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Loan application status"),
                "status_code": status.HTTP_200_OK,
                "data": format_loan_response(loan),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating status of loan {loan_id}", e)
