import re

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum

from common.enums import UserType, UserStatus
from db_domains import CreateUpdateTime


class User(CreateUpdateTime):
    __tablename__ = "users"

    # Never serialized to clients
    PRIVATE_FIELDS = ("password", "phone_otp", "phone_otp_expires_at", "is_deleted", "deleted_at")

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=True)
    phone_number = Column(String(15), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=True)
    user_type = Column(Enum(UserType), default=UserType.customer, nullable=False, index=True)

    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    pincode = Column(String(6), nullable=True)
    profile_image = Column(String(255), nullable=True)

    status = Column(Enum(UserStatus), default=UserStatus.pending_verification, nullable=False, index=True)
    is_phone_verified = Column(Boolean, default=False)
    email_verified_at = Column(DateTime, nullable=True)
    phone_verified_at = Column(DateTime, nullable=True)

    phone_otp = Column(String(10), nullable=True)
    phone_otp_expires_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User id={self.id} phone={self.phone_number} type={self.user_type}>"

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.admin

    @classmethod
    def validate_phone(cls, phone: str) -> bool:
        return bool(re.fullmatch(r"[6-9]\d{9}", phone or ""))

    @classmethod
    def validate_email(cls, email: str) -> bool:
        return bool(re.fullmatch(r"[^@]+@[^@]+\.[^@]+", email)) if email else True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if not self.validate_phone(self.phone_number):
            raise ValueError(f"Invalid phone number: {self.phone_number}")

        if not self.validate_email(self.email):
            raise ValueError(f"Invalid email address: {self.email}")
