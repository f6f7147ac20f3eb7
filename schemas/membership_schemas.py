from typing import Optional

from pydantic import BaseModel, Field, confloat, conint

from common.enums import LoanTypeAssociation


class PaymentConfirmation(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class MembershipPurchaseRequest(PaymentConfirmation):
    card_type_id: int


class MembershipCardTypeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    price: confloat(ge=0)
    validity_months: conint(ge=1, le=120)
    benefits_description: Optional[str] = None
    loan_type_association: LoanTypeAssociation = LoanTypeAssociation.any
    max_loan_amount_benefit: Optional[confloat(ge=0)] = None
    processing_time_benefit: Optional[str] = Field(None, max_length=100)
    is_active: bool = True


class MembershipCardTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    price: Optional[confloat(ge=0)] = None
    validity_months: Optional[conint(ge=1, le=120)] = None
    benefits_description: Optional[str] = None
    loan_type_association: Optional[LoanTypeAssociation] = None
    max_loan_amount_benefit: Optional[confloat(ge=0)] = None
    processing_time_benefit: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
