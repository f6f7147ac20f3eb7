import smtplib
from email.message import EmailMessage
from typing import Optional

from app_logging import app_logger
from config import app_config


class EmailService:
    def __init__(self):
        self.smtp_user_email = app_config.SMTP_USER_EMAIL
        self.smtp_password = app_config.SMTP_PASSWORD
        self.smtp_host = app_config.SMTP_HOST
        self.smtp_port = app_config.SMTP_PORT

    def send_email(self, subject: str, body: str, to_email: str, html_body: Optional[str] = None) -> bool:
        """
        Sends an email with the given subject and body to the specified recipient.
        Errors are logged and silenced without raising exceptions.
        """
        if not (self.smtp_user_email and to_email):
            app_logger.warning(f"Email '{subject}' skipped: sender or recipient not configured")
            return False
        try:
            # Create email message
            msg = EmailMessage()
            msg['Subject'] = subject
            msg['From'] = self.smtp_user_email
            msg['To'] = to_email
            msg.set_content(body)
            if html_body:
                msg.add_alternative(html_body, subtype="html")

            # Connect to SMTP server and send email
            with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=15) as smtp:
                smtp.login(self.smtp_user_email, self.smtp_password)
                smtp.send_message(msg)
                app_logger.info(f"Email sent successfully to {to_email}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            app_logger.error(f"Failed to send email to {to_email}: {str(e)}")
            return False
