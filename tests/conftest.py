import datetime

import pytest
from fastapi.testclient import TestClient

from common.common_services.jwt_service import JWTService
from common.enums import UserType, UserStatus, LoanTypeAssociation, MembershipStatus, LoanType, LoanStatus
from common.utils import PasswordHashing
from db_domains import utc_now
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from main import app
from models.loan import LoanApplication
from models.membership import MembershipCard, MembershipCardType
from models.user import User
from services.dependencies import get_razorpay_service

VALID_SIGNATURE = "valid_signature"
TEST_PASSWORD = "Secret@123"


class FakeRazorpayService:
    """Stands in for the Razorpay client; a payment verifies only with VALID_SIGNATURE."""

    key_id = "rzp_test_key"
    is_configured = True

    def __init__(self):
        self.orders = []

    def create_order(self, amount_in_paise, receipt, notes=None):
        order = {"id": f"order_{len(self.orders) + 1}", "amount": amount_in_paise, "currency": "INR",
                 "receipt": receipt, "notes": notes or {}}
        self.orders.append(order)
        return order

    def verify_payment(self, order_id, payment_id, signature):
        return signature == VALID_SIGNATURE


class FakeStorage:
    """In-memory stand-in for the S3 client."""

    def __init__(self, configured=True):
        self.is_configured = configured
        self.objects = {}

    async def upload_to_s3(self, s3_key, binary_data):
        self.objects[s3_key] = binary_data
        return {"key": s3_key}

    async def generate_presigned_url(self, s3_key, expires_in=None):
        return f"https://bucket.example.com/{s3_key}?signature=test"


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def razorpay():
    return FakeRazorpayService()


@pytest.fixture
def client(database, razorpay):
    app.state.db = database
    app.dependency_overrides[get_razorpay_service] = lambda: razorpay
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.db = None


def create_user(database, phone_number, email=None, user_type=UserType.customer, status=UserStatus.active,
                password=TEST_PASSWORD, full_name="Test User"):
    return DBInterface(User, database).create(
        {
            "full_name": full_name,
            "email": email,
            "phone_number": phone_number,
            "password": PasswordHashing().hash_password(password) if password else None,
            "user_type": user_type,
            "status": status,
        }
    )


def auth_headers(user):
    tokens = JWTService.create_tokens(JWTService.build_payload(user))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def create_card_type(database, name="Gold", association=LoanTypeAssociation.any, price=999.0, validity_months=12):
    return DBInterface(MembershipCardType, database).create(
        {
            "name": name,
            "price": price,
            "validity_months": validity_months,
            "loan_type_association": association,
            "is_active": True,
        }
    )


def create_card(database, user, card_type, expiry_date=None, status=MembershipStatus.active):
    now = utc_now()
    return DBInterface(MembershipCard, database).create(
        {
            "user_id": user.id,
            "card_type_id": card_type.id,
            "purchase_date": now - datetime.timedelta(days=1),
            "expiry_date": expiry_date or now + datetime.timedelta(days=365),
            "status": status,
        }
    )


def create_loan(database, user, status=LoanStatus.submitted, loan_type=LoanType.personal, **extra):
    return DBInterface(LoanApplication, database).create(
        {
            "user_id": user.id,
            "loan_type": loan_type,
            "amount_requested": 250000.0,
            "tenure_months_requested": 24,
            "status": status,
            **extra,
        }
    )


@pytest.fixture
def customer(database):
    return create_user(database, "9876543210", email="customer@example.com")


@pytest.fixture
def other_customer(database):
    return create_user(database, "9876500000", email="other@example.com")


@pytest.fixture
def admin(database):
    return create_user(database, "9000000001", email="admin@example.com", user_type=UserType.admin)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def member(database, customer):
    create_card(database, customer, create_card_type(database))
    return customer
