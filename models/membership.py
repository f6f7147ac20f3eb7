from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, ForeignKey, Text, Index, text

from common.enums import LoanTypeAssociation, MembershipStatus
from db_domains import CreateUpdateTime, CreateByUpdateBy, utc_now


class MembershipCardType(CreateUpdateTime, CreateByUpdateBy):
    __tablename__ = "membership_card_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    validity_months = Column(Integer, nullable=False)
    benefits_description = Column(Text, nullable=True)
    loan_type_association = Column(
        Enum(LoanTypeAssociation), default=LoanTypeAssociation.any, nullable=False
    )
    max_loan_amount_benefit = Column(Float, nullable=True)
    processing_time_benefit = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, index=True)

    def __repr__(self):
        return f"<MembershipCardType id={self.id} name={self.name} association={self.loan_type_association}>"


class MembershipCard(CreateUpdateTime):
    __tablename__ = "membership_cards"
    __table_args__ = (
        # At most one card per user may hold the active status
        Index(
            "uq_membership_cards_active_user", "user_id", unique=True,
            sqlite_where=text("status = 'active'"), postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    card_type_id = Column(Integer, ForeignKey("membership_card_types.id"), nullable=False, index=True)
    purchase_date = Column(DateTime, default=utc_now, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    payment_id = Column(String(100), unique=True, nullable=True)
    status = Column(Enum(MembershipStatus), default=MembershipStatus.active, nullable=False, index=True)

    def __repr__(self):
        return f"<MembershipCard id={self.id} user_id={self.user_id} status={self.status} expiry={self.expiry_date}>"
