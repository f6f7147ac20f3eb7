from typing import Dict

import razorpay
from razorpay.errors import SignatureVerificationError

from app_logging import app_logger


class RazorpayService:
    def __init__(self, key_id: str, key_secret: str):
        self.key_id = key_id
        self.is_configured = bool(key_id and key_secret)
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount_in_paise: int, receipt: str, notes: Dict | None = None) -> Dict:
        """
            Create an order to be paid through Razorpay checkout:
            {
                "amount": 49900,
                "currency": "INR",
                "receipt": "membership_card_3_17",
                "notes": {"type": "membership_card", "item_id": "3"}
            }
        """
        order_data = {
            "amount": amount_in_paise,
            "currency": "INR",
            "receipt": receipt,
            "notes": notes or {},
        }
        app_logger.info(f"Creating Razorpay order | receipt: {receipt}, amount: {amount_in_paise}")
        return self.client.order.create(data=order_data)

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        """
        Check the checkout signature returned to the client after a successful payment.
        """
        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
            return True
        except SignatureVerificationError:
            app_logger.warning(f"Payment signature mismatch for order {order_id}, payment {payment_id}")
            return False
