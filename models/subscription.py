from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, ForeignKey, Text, JSON

from common.enums import SubscriptionStatus
from db_domains import CreateUpdateTime, CreateByUpdateBy, utc_now


class CashLendingSubscriptionPlan(CreateUpdateTime, CreateByUpdateBy):
    __tablename__ = "cash_lending_subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    duration_days = Column(Integer, nullable=False)
    features = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, index=True)


class CashLendingSubscription(CreateUpdateTime):
    __tablename__ = "cash_lending_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("cash_lending_subscription_plans.id"), nullable=False, index=True)
    start_date = Column(DateTime, default=utc_now, nullable=False)
    end_date = Column(DateTime, nullable=False)
    payment_id = Column(String(100), unique=True, nullable=True)
    status = Column(Enum(SubscriptionStatus), default=SubscriptionStatus.active, nullable=False, index=True)

    def __repr__(self):
        return f"<CashLendingSubscription id={self.id} user_id={self.user_id} status={self.status}>"
