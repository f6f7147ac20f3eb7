from fastapi import Depends, Request

from common.common_services.aws_services import AWSClient
from config import app_config
from db_domains.db import Database
from services.auth_service import UserAuthService, AdminAuthService
from services.bank_partner_service import BankPartnerService
from services.content_service import ContentService
from services.dashboard import DashboardService
from services.document_service import DocumentService
from services.enquiry_service import EnquiryService
from services.loan_service.admin_loan import AdminLoanService
from services.loan_service.user_loan import UserLoanService
from services.membership_service import MembershipService
from services.payment_service import PaymentService
from services.razorpay_service import RazorpayService
from services.subscription_service import SubscriptionService


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_razorpay_service():
    return RazorpayService(app_config.RAZORPAY_KEY_ID, app_config.RAZORPAY_SECRET)


def get_user_auth_service(database: Database = Depends(get_database)) -> UserAuthService:
    return UserAuthService(database)


def get_admin_auth_service(database: Database = Depends(get_database)) -> AdminAuthService:
    return AdminAuthService(database)


def get_membership_service(
        database: Database = Depends(get_database), razorpay_service: RazorpayService = Depends(get_razorpay_service)
) -> MembershipService:
    return MembershipService(database, razorpay_service)


def get_subscription_service(
        database: Database = Depends(get_database), razorpay_service: RazorpayService = Depends(get_razorpay_service)
) -> SubscriptionService:
    return SubscriptionService(database, razorpay_service)


def get_payment_service(
        database: Database = Depends(get_database), razorpay_service: RazorpayService = Depends(get_razorpay_service)
) -> PaymentService:
    return PaymentService(database, razorpay_service)


def get_user_loan_service(
        database: Database = Depends(get_database), membership_service: MembershipService = Depends(get_membership_service)
) -> UserLoanService:
    return UserLoanService(database, membership_service)


def get_admin_loan_service(
        database: Database = Depends(get_database), membership_service: MembershipService = Depends(get_membership_service)
) -> AdminLoanService:
    return AdminLoanService(database, membership_service)


def get_storage_client() -> AWSClient:
    return AWSClient()


def get_document_service(
        loan_service: UserLoanService = Depends(get_user_loan_service), aws_client: AWSClient = Depends(get_storage_client)
) -> DocumentService:
    return DocumentService(loan_service, aws_client)


def get_bank_partner_service(database: Database = Depends(get_database)) -> BankPartnerService:
    return BankPartnerService(database)


def get_content_service(database: Database = Depends(get_database)) -> ContentService:
    return ContentService(database)


def get_enquiry_service(database: Database = Depends(get_database)) -> EnquiryService:
    return EnquiryService(database)


def get_dashboard_service(database: Database = Depends(get_database)) -> DashboardService:
    return DashboardService(database)
