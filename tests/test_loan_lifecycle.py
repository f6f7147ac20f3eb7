import pytest

from common.enums import LoanStatus, LoanAction
from common.exceptions import InvalidStateTransition
from services.loan_service.lifecycle import (
    next_status, can_transition, allowed_actions, check_approval_invariant, TERMINAL_STATUSES, DECISION_STATUSES,
)
from services.loan_service.user_loan import UserLoanService
from tests.conftest import create_loan


@pytest.mark.parametrize("current, action, expected", [
    (LoanStatus.draft, LoanAction.submit, LoanStatus.submitted),
    (LoanStatus.submitted, LoanAction.start_review, LoanStatus.under_review),
    (LoanStatus.under_review, LoanAction.request_documents, LoanStatus.requires_documents),
    (LoanStatus.requires_documents, LoanAction.resubmit_documents, LoanStatus.under_review),
    (LoanStatus.under_review, LoanAction.approve, LoanStatus.approved),
    (LoanStatus.requires_documents, LoanAction.reject, LoanStatus.rejected),
    (LoanStatus.approved, LoanAction.disburse, LoanStatus.disbursed),
    (LoanStatus.disbursed, LoanAction.close, LoanStatus.closed),
    (LoanStatus.submitted, LoanAction.cancel, LoanStatus.cancelled),
    (LoanStatus.requires_documents, LoanAction.update, LoanStatus.requires_documents),
])
def test_legal_transitions(current, action, expected):
    assert next_status(current, action) == expected


@pytest.mark.parametrize("current", [s for s in LoanStatus if s not in DECISION_STATUSES])
@pytest.mark.parametrize("action", [LoanAction.approve, LoanAction.reject])
def test_decisions_only_from_review_statuses(current, action):
    with pytest.raises(InvalidStateTransition):
        next_status(current, action)


@pytest.mark.parametrize("current", sorted(TERMINAL_STATUSES - {LoanStatus.approved, LoanStatus.disbursed}))
def test_end_states_allow_nothing(current):
    assert allowed_actions(current) == []


def test_approved_loan_can_no_longer_be_edited_or_cancelled():
    assert not can_transition(LoanStatus.approved, LoanAction.update)
    assert not can_transition(LoanStatus.approved, LoanAction.cancel)
    assert allowed_actions(LoanStatus.approved) == [LoanAction.disburse]


def test_illegal_transition_message_names_the_action():
    with pytest.raises(InvalidStateTransition) as exc_info:
        next_status(LoanStatus.rejected, LoanAction.approve)
    assert exc_info.value.message == "Loan application cannot be approved in its current status"
    assert exc_info.value.status_code == 400


def test_transition_persists_new_status(database, customer):
    loan = create_loan(database, customer, status=LoanStatus.submitted)
    service = UserLoanService(database)

    updated = service.transition(loan, LoanAction.start_review)

    assert updated.status == LoanStatus.under_review
    assert service.get_loan(loan.id).status == LoanStatus.under_review


def test_lost_race_is_rejected_without_overwriting(database, customer):
    loan = create_loan(database, customer, status=LoanStatus.under_review)
    service = UserLoanService(database)
    stale_copy = service.get_loan(loan.id)

    service.transition(loan, LoanAction.approve, {
        "amount_approved": 200000.0, "interest_rate_final": 12.0, "tenure_months_final": 24,
    })
    with pytest.raises(InvalidStateTransition) as exc_info:
        service.transition(stale_copy, LoanAction.reject, {"rejection_reason": "Too late"})

    assert exc_info.value.message_key == "concurrent_status_change"
    stored = service.get_loan(loan.id)
    assert stored.status == LoanStatus.approved
    assert stored.rejection_reason is None


def test_approval_invariant(database, customer):
    pending = create_loan(database, customer, status=LoanStatus.under_review)
    approved = create_loan(
        database, customer, status=LoanStatus.approved,
        amount_approved=150000.0, interest_rate_final=11.5, tenure_months_final=36,
    )
    broken = create_loan(database, customer, status=LoanStatus.approved, amount_approved=150000.0)

    assert check_approval_invariant(pending)
    assert check_approval_invariant(approved)
    assert not check_approval_invariant(broken)
