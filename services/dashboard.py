from datetime import timedelta
from typing import Dict, Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.enums import LoanStatus, LoanType, UserType, UserStatus, MembershipStatus
from common.exceptions import AppException, internal_error_response
from db_domains import utc_now
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.bank_partner import BankPartner
from models.loan import LoanApplication
from models.membership import MembershipCard, MembershipCardType
from models.user import User
from services.loan_service.admin_loan import parse_date_range
from services.loan_service.lifecycle import PENDING_STATUSES, APPROVED_STATUSES


def percentage(part: float, whole: float) -> float:
    return round((part / whole) * 100, 1) if whole else 0.0


def growth_rate(current: float, previous: float) -> float:
    return round(((current - previous) / previous) * 100, 1) if previous else 0.0


class DashboardService:
    def __init__(self, database: Database) -> None:
        self.database = database
        self.user_interface = DBInterface(User, database)
        self.loan_interface = DBInterface(LoanApplication, database)
        self.card_interface = DBInterface(MembershipCard, database)
        self.partner_interface = DBInterface(BankPartner, database)

    def _membership_revenue(self, start, end) -> float:
        session: Session = self.database.session()
        try:
            total = (
                session.query(func.coalesce(func.sum(MembershipCardType.price), 0))
                .select_from(MembershipCard)
                .join(MembershipCardType, MembershipCardType.id == MembershipCard.card_type_id)
                .filter(MembershipCard.purchase_date >= start, MembershipCard.purchase_date <= end)
                .scalar()
            )
            return float(total or 0)
        finally:
            session.close()

    def _memberships_by_card_type(self, start, end) -> dict[str, int]:
        session: Session = self.database.session()
        try:
            rows = (
                session.query(MembershipCardType.name, func.count(MembershipCard.id))
                .join(MembershipCard, MembershipCardType.id == MembershipCard.card_type_id)
                .filter(MembershipCard.purchase_date >= start, MembershipCard.purchase_date <= end)
                .group_by(MembershipCardType.name)
                .all()
            )
            return {name: count for name, count in rows}
        finally:
            session.close()

    def _loan_status_counts(self, start, end) -> dict[str, int]:
        session: Session = self.database.session()
        try:
            rows = (
                session.query(LoanApplication.status, func.count())
                .filter(
                    LoanApplication.is_deleted.is_(False),
                    LoanApplication.application_date >= start, LoanApplication.application_date <= end
                )
                .group_by(LoanApplication.status)
                .all()
            )
            # Build dict with default 0 for all LoanStatus
            status_counts = {loan_status.value: 0 for loan_status in LoanStatus}
            for db_status, count in rows:
                status_counts[LoanStatus(db_status).value] = count
            return status_counts
        finally:
            session.close()

    def get_counts(self) -> Dict[str, Any]:
        try:
            app_logger.info("Starting to fetch dashboard counts.")
            now = utc_now()
            thirty_days_ago = now - timedelta(days=30)
            start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

            customer_filter = [User.user_type != UserType.admin, User.is_deleted.is_(False)]
            total_users = self.user_interface.count_all_by_fields(customer_filter)
            users_last_30_days = self.user_interface.count_all_by_fields(
                customer_filter + [User.created_at >= thirty_days_ago]
            )

            loan_filter = [LoanApplication.is_deleted.is_(False)]
            total_applications = self.loan_interface.count_all_by_fields(loan_filter)
            pending_applications = self.loan_interface.count_all_by_fields(
                loan_filter + [LoanApplication.status.in_(PENDING_STATUSES)]
            )
            approved_applications = self.loan_interface.count_all_by_fields(
                loan_filter + [LoanApplication.status.in_(APPROVED_STATUSES)]
            )

            active_memberships = self.card_interface.count_all_by_fields(
                [MembershipCard.status == MembershipStatus.active, MembershipCard.expiry_date > now]
            )
            memberships_this_month = self.card_interface.count_all_by_fields(
                [MembershipCard.purchase_date >= start_of_month]
            )

            data = {
                "total_users": total_users,
                "users_last_30_days": users_last_30_days,
                "user_growth": percentage(users_last_30_days, total_users),
                "pending_applications": pending_applications,
                "total_applications": total_applications,
                "approved_applications": approved_applications,
                "approval_rate": percentage(approved_applications, total_applications),
                "active_memberships": active_memberships,
                "memberships_this_month": memberships_this_month,
                "monthly_revenue": self._membership_revenue(start_of_month, now),
            }
            app_logger.info(f"Dashboard counts fetched: {data}")
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Dashboard stats"),
                "status_code": status.HTTP_200_OK,
                "data": data,
            }
        except Exception as e:
            return internal_error_response("Error fetching dashboard counts", e)

    def get_overview_report(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
        try:
            start, end = parse_date_range(start_date, end_date)
            end = end or utc_now()
            start = start or (end - timedelta(days=30))
            period = end - start
            previous_start, previous_end = start - period, start
            app_logger.info(f"Generating overview report from {start} to {end}")

            customer_filter = [User.user_type != UserType.admin, User.is_deleted.is_(False)]
            new_users = self.user_interface.count_all_by_fields(
                customer_filter + [User.created_at >= start, User.created_at <= end]
            )
            previous_new_users = self.user_interface.count_all_by_fields(
                customer_filter + [User.created_at >= previous_start, User.created_at < previous_end]
            )

            in_range = [
                LoanApplication.is_deleted.is_(False),
                LoanApplication.application_date >= start, LoanApplication.application_date <= end,
            ]
            status_counts = self._loan_status_counts(start, end)
            total_applications = sum(status_counts.values())
            approved_applications = sum(status_counts[s.value] for s in APPROVED_STATUSES)
            by_loan_type = {
                loan_type.value: self.loan_interface.count_all_by_fields(
                    in_range + [LoanApplication.loan_type == loan_type]
                )
                for loan_type in LoanType
            }

            memberships_sold = self.card_interface.count_all_by_fields(
                [MembershipCard.purchase_date >= start, MembershipCard.purchase_date <= end]
            )
            previous_memberships_sold = self.card_interface.count_all_by_fields(
                [MembershipCard.purchase_date >= previous_start, MembershipCard.purchase_date < previous_end]
            )

            partner_filter = [BankPartner.is_deleted.is_(False)]
            data = {
                "period": {"start_date": start.isoformat(), "end_date": end.isoformat()},
                "users": {
                    "total": self.user_interface.count_all_by_fields(customer_filter),
                    "new_in_period": new_users,
                    "active": self.user_interface.count_all_by_fields(
                        customer_filter + [User.status == UserStatus.active]
                    ),
                    "growth_rate": growth_rate(new_users, previous_new_users),
                },
                "loans": {
                    "total_applications": total_applications,
                    "by_status": status_counts,
                    "by_loan_type": by_loan_type,
                    "pending_applications": sum(status_counts[s.value] for s in PENDING_STATUSES),
                    "total_amount_requested": self.loan_interface.sum_by_fields("amount_requested", in_range),
                    "total_amount_approved": self.loan_interface.sum_by_fields("amount_approved", in_range),
                    "approval_rate": percentage(approved_applications, total_applications),
                },
                "memberships": {
                    "sold_in_period": memberships_sold,
                    "by_card_type": self._memberships_by_card_type(start, end),
                    "revenue": self._membership_revenue(start, end),
                    "growth_rate": growth_rate(memberships_sold, previous_memberships_sold),
                },
                "partners": {
                    "total_partners": self.partner_interface.count_all_by_fields(partner_filter),
                    "active_partners": self.partner_interface.count_all_by_fields(
                        partner_filter + [BankPartner.is_active.is_(True)]
                    ),
                },
            }
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Overview report"),
                "status_code": status.HTTP_200_OK,
                "data": data,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error generating overview report", e)
