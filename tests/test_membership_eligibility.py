import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from common.enums import LoanType, LoanTypeAssociation, MembershipStatus
from common.exceptions import Forbidden
from db_domains import utc_now
from models.membership import MembershipCard
from services.membership_service import MembershipService, compute_expiry, card_type_supports
from tests.conftest import create_card, create_card_type


@pytest.fixture
def service(database):
    return MembershipService(database)


def test_no_card_is_not_eligible(service, customer):
    assert service.eligibility_failure(customer.id, LoanType.personal) == "active_membership_required"
    assert not service.is_eligible(customer.id, LoanType.personal)


def test_active_any_card_supports_every_loan_type(service, member):
    assert service.is_eligible(member.id, LoanType.personal)
    assert service.is_eligible(member.id, LoanType.business)


def test_card_past_expiry_is_inactive_even_if_status_is_active(database, service, customer):
    card_type = create_card_type(database)
    create_card(database, customer, card_type, expiry_date=utc_now() - datetime.timedelta(minutes=1))

    assert service.eligibility_failure(customer.id, LoanType.personal) == "active_membership_required"


def test_cancelled_card_is_ignored(database, service, customer):
    create_card(database, customer, create_card_type(database), status=MembershipStatus.cancelled)

    assert not service.is_eligible(customer.id, LoanType.personal)


def test_card_type_must_support_loan_type(database, service, customer):
    create_card(database, customer, create_card_type(database, name="Business", association=LoanTypeAssociation.business))

    assert service.is_eligible(customer.id, LoanType.business)
    assert service.eligibility_failure(customer.id, LoanType.personal) == "card_does_not_support_loan_type"


def test_more_than_one_supporting_card_is_not_eligible(database, service, customer, monkeypatch):
    gold = create_card_type(database, name="Gold")
    silver = create_card_type(database, name="Silver")
    expiry = utc_now() + datetime.timedelta(days=30)
    cards = [
        MembershipCard(user_id=customer.id, card_type_id=card_type.id, status=MembershipStatus.active, expiry_date=expiry)
        for card_type in (gold, silver)
    ]
    monkeypatch.setattr(service, "get_active_cards", lambda user_id, now=None: cards)

    assert service.eligibility_failure(customer.id, LoanType.personal) == "multiple_active_memberships"


def test_storage_holds_one_active_card_per_user(database, customer):
    card_type = create_card_type(database)
    create_card(database, customer, card_type)

    with pytest.raises(IntegrityError):
        create_card(database, customer, card_type)
    assert create_card(database, customer, card_type, status=MembershipStatus.expired).id is not None


def test_eligibility_is_evaluated_at_the_given_instant(service, member):
    later = utc_now() + datetime.timedelta(days=400)

    assert service.is_eligible(member.id, LoanType.personal)
    assert not service.is_eligible(member.id, LoanType.personal, now=later)


def test_check_raises_forbidden_with_reason(service, customer):
    with pytest.raises(Forbidden) as exc_info:
        service.check_loan_eligibility(customer.id, LoanType.business)
    assert exc_info.value.message_key == "active_membership_required"


def test_expiry_adds_calendar_months():
    purchase = datetime.datetime(2024, 1, 31, 10, 0)

    assert compute_expiry(purchase, 1) == datetime.datetime(2024, 2, 29, 10, 0)
    assert compute_expiry(purchase, 12) == datetime.datetime(2025, 1, 31, 10, 0)


def test_card_type_supports_handles_missing_type():
    assert not card_type_supports(None, LoanType.personal)
