from enum import Enum


# User Enums
class UserType(str, Enum):
    customer = "customer"
    cash_lending_customer = "cash_lending_customer"
    admin = "admin"


class UserStatus(str, Enum):
    pending_verification = "pending_verification"
    active = "active"
    suspended = "suspended"


# Loan Enums
class LoanType(str, Enum):
    personal = "personal"
    business = "business"


class LoanStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    under_review = "under_review"
    requires_documents = "requires_documents"
    approved = "approved"
    rejected = "rejected"
    disbursed = "disbursed"
    closed = "closed"
    cancelled = "cancelled"


class LoanAction(str, Enum):
    submit = "submit"
    update = "update"
    start_review = "start_review"
    request_documents = "request_documents"
    resubmit_documents = "resubmit_documents"
    approve = "approve"
    reject = "reject"
    disburse = "disburse"
    close = "close"
    cancel = "cancel"


class DocumentType(str, Enum):
    pan_card = "pan_card"
    aadhaar_card = "aadhaar_card"
    bank_statement = "bank_statement"
    salary_slip = "salary_slip"
    itr = "itr"
    business_proof = "business_proof"
    address_proof = "address_proof"
    photo = "photo"


# Membership / Subscription Enums
class LoanTypeAssociation(str, Enum):
    personal = "personal"
    business = "business"
    any = "any"


class MembershipStatus(str, Enum):
    active = "active"
    expired = "expired"
    cancelled = "cancelled"


class SubscriptionStatus(str, Enum):
    active = "active"
    expired = "expired"
    cancelled = "cancelled"
    grace_period = "grace_period"


class OrderType(str, Enum):
    membership_card = "membership_card"
    cash_lending_subscription = "cash_lending_subscription"


class PaymentOrderStatus(str, Enum):
    created = "created"
    paid = "paid"


# General Enums
class EnquiryStatus(str, Enum):
    new = "new"
    in_progress = "in_progress"
    resolved = "resolved"
