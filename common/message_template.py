from config import app_config


def get_otp_message(otp: str) -> str:
    return (
        f"Hello Customer,\nYour OTP for login is {otp}. "
        f"This OTP is valid for {app_config.OTP_VALIDITY_MINUTES} minutes. "
        f"Please do not share it with anyone.\nBLUMIQ"
    )


def get_loan_approval_message(application_uid: str, amount: float) -> str:
    return (
        f"Dear Customer,\nYour loan application {application_uid} for Rs.{amount:.2f} has been approved. "
        f"Thank you for choosing us!\nBLUMIQ"
    )


def get_loan_rejection_message(application_uid: str, reason: str) -> str:
    return (
        f"Dear Customer,\nYour loan application {application_uid} has been rejected. "
        f"Reason: {reason}\nBLUMIQ"
    )


def get_password_reset_otp_message(otp: str) -> str:
    return (
        f"Hello Customer,\nYour OTP to reset your password is {otp}. "
        f"This OTP is valid for {app_config.OTP_VALIDITY_MINUTES} minutes. "
        f"Please do not share it with anyone.\nBLUMIQ"
    )
