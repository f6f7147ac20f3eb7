from typing import Optional, Dict

from pydantic import BaseModel, Field, confloat, conint, model_validator

from common.enums import LoanType, DocumentType, LoanAction

MIN_LOAN_AMOUNT = 10_000
MAX_LOAN_AMOUNT = 10_000_000


class LoanForm(BaseModel):
    loan_type: LoanType
    amount_requested: confloat(ge=MIN_LOAN_AMOUNT, le=MAX_LOAN_AMOUNT)
    tenure_months_requested: conint(ge=6, le=60)
    interest_rate_proposed: Optional[confloat(ge=1, le=30)] = None
    purpose: Optional[str] = Field(None, max_length=500)
    documents_submitted: Dict[DocumentType, str] = Field(default_factory=dict)


class UpdateLoanForm(BaseModel):
    amount_requested: Optional[confloat(ge=MIN_LOAN_AMOUNT, le=MAX_LOAN_AMOUNT)] = None
    tenure_months_requested: Optional[conint(ge=6, le=60)] = None
    purpose: Optional[str] = Field(None, max_length=500)
    documents_submitted: Optional[Dict[DocumentType, str]] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class LoanApprovalForm(BaseModel):
    approved_amount: confloat(ge=1000)
    interest_rate: confloat(ge=1, le=30)
    tenure_months: conint(ge=1, le=60)
    processing_fee: confloat(ge=0)
    remarks: Optional[str] = Field(None, max_length=1000)


class LoanRejectionForm(BaseModel):
    reason: str = Field(..., min_length=3, max_length=1000)
    remarks: Optional[str] = Field(None, max_length=1000)


ADMIN_STATUS_ACTIONS = (
    LoanAction.start_review, LoanAction.request_documents, LoanAction.disburse, LoanAction.close,
)


class LoanStatusUpdateForm(BaseModel):
    action: LoanAction
    remarks: Optional[str] = Field(None, max_length=1000)
    bank_partner_id: Optional[int] = None

    @model_validator(mode="after")
    def check_action(self):
        if self.action not in ADMIN_STATUS_ACTIONS:
            allowed = ", ".join(action.value for action in ADMIN_STATUS_ACTIONS)
            raise ValueError(f"action must be one of: {allowed}")
        if self.bank_partner_id is not None and self.action != LoanAction.disburse:
            raise ValueError("bank_partner_id can only be set when disbursing")
        return self
