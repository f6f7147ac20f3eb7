import re
from typing import Optional

from pydantic import BaseModel, EmailStr, constr, model_validator

from common.enums import UserType
from config import app_config

PHONE_PATTERN = r"^[6-9]\d{9}$"
PINCODE_PATTERN = r"^[1-9][0-9]{5}$"


class RegisterRequest(BaseModel):
    full_name: constr(strip_whitespace=True, min_length=2, max_length=255)
    email: EmailStr
    phone_number: constr(pattern=PHONE_PATTERN)
    password: constr(min_length=8, max_length=128)
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[constr(pattern=PINCODE_PATTERN)] = None
    user_type: UserType = UserType.customer

    @model_validator(mode="after")
    def check_user_type(self):
        if self.user_type == UserType.admin:
            raise ValueError("user_type must be customer or cash_lending_customer")
        return self


class LoginRequest(BaseModel):
    email_or_phone: constr(strip_whitespace=True, min_length=3)
    password: constr(min_length=1)


class MobileAuthRequest(BaseModel):
    phone_number: constr(pattern=PHONE_PATTERN)


class VerifyOTPRequest(BaseModel):
    phone_number: constr(pattern=PHONE_PATTERN)
    otp: str

    @model_validator(mode="after")
    def check_otp_format(self):
        if not (self.otp.isdigit() and len(self.otp) == app_config.OTP_LENGTH):
            raise ValueError(f"OTP must be a {app_config.OTP_LENGTH} digit number")
        return self


class ResetPasswordRequest(VerifyOTPRequest):
    new_password: constr(min_length=8, max_length=128)


class RefreshToken(BaseModel):
    refresh_token: str


class UpdateProfileRequest(BaseModel):
    full_name: Optional[constr(strip_whitespace=True, min_length=2, max_length=255)] = None
    email: Optional[EmailStr] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[constr(pattern=PINCODE_PATTERN)] = None


# Admin Schemas
class AdminLoginRequest(BaseModel):
    login: str
    password: str

    @model_validator(mode='after')
    def validate_login_and_password(self):
        email_pattern = r'^[\w\.-]+@[\w\.-]+\.\w+$'

        if not (re.match(email_pattern, self.login) or re.match(PHONE_PATTERN, self.login)):
            raise ValueError('Login must be a valid email or phone number')

        if len(self.password) < 6:
            raise ValueError('Password must be at least 6 characters long')

        return self
