import random
import string

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, ForeignKey, JSON, Text

from common.enums import LoanType, LoanStatus
from db_domains import CreateUpdateTime, utc_now


class LoanApplication(CreateUpdateTime):
    __tablename__ = "loan_applications"

    id = Column(Integer, primary_key=True, index=True)
    application_uid = Column(String(20), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    loan_type = Column(Enum(LoanType), nullable=False, index=True)
    amount_requested = Column(Float, nullable=False)
    amount_approved = Column(Float, nullable=True)
    interest_rate_proposed = Column(Float, nullable=True)
    interest_rate_final = Column(Float, nullable=True)
    tenure_months_requested = Column(Integer, nullable=False)
    tenure_months_final = Column(Integer, nullable=True)
    processing_fee = Column(Float, nullable=True)
    purpose = Column(String(500), nullable=True)

    status = Column(
        Enum(LoanStatus), default=LoanStatus.submitted, server_default=LoanStatus.submitted.value,
        nullable=False, index=True
    )
    bank_partner_id = Column(Integer, ForeignKey("bank_partners.id", ondelete="SET NULL"), nullable=True)

    application_date = Column(DateTime, default=utc_now, nullable=False)
    # document type -> storage key
    documents_submitted = Column(JSON, default=dict, nullable=False)
    admin_remarks = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    approved_date = Column(DateTime, nullable=True)
    disbursed_date = Column(DateTime, nullable=True)
    closed_date = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<LoanApplication id={self.id} uid={self.application_uid} status={self.status}>"

    @staticmethod
    def generate_application_uid() -> str:
        """
        Generate an application number like BLQKRTDZ4821M
        """
        letters_part = ''.join(random.choices(string.ascii_uppercase, k=5))
        digits_part = ''.join(random.choices(string.digits, k=4))
        last_letter = random.choice(string.ascii_uppercase)
        return f"BLQ{letters_part}{digits_part}{last_letter}"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if not self.application_uid:
            self.application_uid = self.generate_application_uid()
        if self.documents_submitted is None:
            self.documents_submitted = {}
