import requests

from app_logging import app_logger
from config import app_config


class SMSService:
    @staticmethod
    def send_sms(phone_number: str, message: str) -> bool:
        if not app_config.SMS_GATEWAY_URL:
            app_logger.warning(f"SMS gateway not configured, message to {phone_number[-4:]} not sent")
            return False
        try:
            params = {
                "apikey": app_config.SMS_API_KEY,
                "senderid": app_config.SMS_SENDER_ID,
                "number": phone_number,
                "text": message,
            }
            response = requests.get(app_config.SMS_GATEWAY_URL, params=params, timeout=10)
            if response.status_code == 200:
                app_logger.info(f"SMS sent to {phone_number[-4:]}")
                return True
            else:
                app_logger.error(f"SMS failed for {phone_number[-4:]}. Status: {response.status_code}")
                return False
        except requests.RequestException as e:
            app_logger.exception(f"SMS send failed. Error: {str(e)}")
            return False
