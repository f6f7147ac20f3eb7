"""
Loan application status lifecycle.

Every status change goes through `next_status`, which consults a single transition table. A pair that is not
in the table is an illegal move and raises `InvalidStateTransition`; nothing else in the code base decides
whether a transition is allowed.
"""
from typing import Optional

from common.enums import LoanStatus, LoanAction
from common.exceptions import InvalidStateTransition

CUSTOMER_EDITABLE_STATUSES = frozenset({
    LoanStatus.draft, LoanStatus.submitted, LoanStatus.requires_documents,
})
CANCELLABLE_STATUSES = frozenset({
    LoanStatus.draft, LoanStatus.submitted, LoanStatus.under_review, LoanStatus.requires_documents,
})
DECISION_STATUSES = frozenset({LoanStatus.under_review, LoanStatus.requires_documents})
TERMINAL_STATUSES = frozenset({
    LoanStatus.approved, LoanStatus.rejected, LoanStatus.disbursed, LoanStatus.closed, LoanStatus.cancelled,
})
APPROVED_STATUSES = frozenset({LoanStatus.approved, LoanStatus.disbursed, LoanStatus.closed})
PENDING_STATUSES = frozenset({LoanStatus.submitted, LoanStatus.under_review, LoanStatus.requires_documents})

TRANSITIONS: dict[tuple[LoanStatus, LoanAction], LoanStatus] = {
    (LoanStatus.draft, LoanAction.submit): LoanStatus.submitted,
    (LoanStatus.submitted, LoanAction.start_review): LoanStatus.under_review,
    (LoanStatus.under_review, LoanAction.request_documents): LoanStatus.requires_documents,
    (LoanStatus.requires_documents, LoanAction.resubmit_documents): LoanStatus.under_review,
    (LoanStatus.approved, LoanAction.disburse): LoanStatus.disbursed,
    (LoanStatus.disbursed, LoanAction.close): LoanStatus.closed,
}
TRANSITIONS.update({(status, LoanAction.update): status for status in CUSTOMER_EDITABLE_STATUSES})
TRANSITIONS.update({(status, LoanAction.approve): LoanStatus.approved for status in DECISION_STATUSES})
TRANSITIONS.update({(status, LoanAction.reject): LoanStatus.rejected for status in DECISION_STATUSES})
TRANSITIONS.update({(status, LoanAction.cancel): LoanStatus.cancelled for status in CANCELLABLE_STATUSES})

# Past participle used in the user facing error message
ACTION_LABELS = {
    LoanAction.submit: "submitted",
    LoanAction.update: "updated",
    LoanAction.start_review: "moved to review",
    LoanAction.request_documents: "sent back for documents",
    LoanAction.resubmit_documents: "resubmitted",
    LoanAction.approve: "approved",
    LoanAction.reject: "rejected",
    LoanAction.disburse: "disbursed",
    LoanAction.close: "closed",
    LoanAction.cancel: "cancelled",
}


def _as_status(value) -> LoanStatus:
    return value if isinstance(value, LoanStatus) else LoanStatus(value)


def can_transition(current: LoanStatus | str, action: LoanAction) -> bool:
    return (_as_status(current), action) in TRANSITIONS


def next_status(current: LoanStatus | str, action: LoanAction) -> LoanStatus:
    target: Optional[LoanStatus] = TRANSITIONS.get((_as_status(current), action))
    if target is None:
        raise InvalidStateTransition("invalid_state_transition", ACTION_LABELS[action])
    return target


def allowed_actions(current: LoanStatus | str) -> list[LoanAction]:
    current = _as_status(current)
    return [action for (status, action) in TRANSITIONS if status == current]


def check_approval_invariant(loan) -> bool:
    """
    The final terms are present exactly when the application has reached the approved part of the lifecycle.
    """
    terms = (loan.amount_approved, loan.interest_rate_final, loan.tenure_months_final)
    if _as_status(loan.status) in APPROVED_STATUSES:
        return all(term is not None for term in terms)
    return all(term is None for term in terms)
