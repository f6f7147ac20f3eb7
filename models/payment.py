from sqlalchemy import Column, Integer, String, Enum, ForeignKey

from common.enums import OrderType, PaymentOrderStatus
from db_domains import CreateUpdateTime


class PaymentOrder(CreateUpdateTime):
    """Razorpay order issued by create-order, pinned to the buyer, the item and the amount charged."""

    __tablename__ = "payment_orders"

    id = Column(Integer, primary_key=True, index=True)
    razorpay_order_id = Column(String(100), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_type = Column(Enum(OrderType), nullable=False)
    item_id = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False)  # stored in paise
    currency = Column(String(10), default="INR", nullable=False)
    status = Column(Enum(PaymentOrderStatus), default=PaymentOrderStatus.created, nullable=False, index=True)
    payment_id = Column(String(100), unique=True, nullable=True)

    def __repr__(self):
        return f"<PaymentOrder {self.razorpay_order_id} user_id={self.user_id} status={self.status}>"
