import datetime
from math import ceil
from typing import Optional, Any

from fastapi import UploadFile
from passlib.context import CryptContext

from app_logging import app_logger
from common.exceptions import ValidationError
from db_domains import to_dict
from models.loan import LoanApplication
from models.membership import MembershipCard, MembershipCardType
from models.user import User

ALLOWED_DOCUMENT_CONTENT_TYPES = [
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
]
MAX_DOCUMENT_SIZE_BYTES = 10 * 1024 * 1024

ALLOWED_IMAGE_CONTENT_TYPES = ["image/jpeg", "image/jpg", "image/png"]
MAX_PROFILE_IMAGE_SIZE_BYTES = 5 * 1024 * 1024


def enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def isoformat_or_none(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def format_user_response(user: User) -> dict:
    """
        Formats a User SQLAlchemy object for clients. Password hash and OTP fields never leave this function.

        Args:
            user (User): User SQLAlchemy ORM object

        Returns:
            dict: Formatted user data
    """
    data = {key: value for key, value in to_dict(user).items() if key not in User.PRIVATE_FIELDS}
    data["user_type"] = enum_value(user.user_type)
    data["status"] = enum_value(user.status)
    for field in ("created_at", "modified_at", "email_verified_at", "phone_verified_at"):
        data[field] = isoformat_or_none(data.get(field))
    return data


def format_user_summary(user: Optional[User]) -> dict:
    if not user:
        return {}
    return {
        "id": user.id,
        "full_name": user.full_name,
        "email": user.email or "",
        "phone_number": user.phone_number,
        "user_type": enum_value(user.user_type),
        "status": enum_value(user.status),
    }


def format_loan_response(loan: LoanApplication, applicant: Optional[User] = None) -> dict:
    data = to_dict(loan)
    data.pop("is_deleted", None)
    data.pop("deleted_at", None)
    data["loan_type"] = enum_value(loan.loan_type)
    data["status"] = enum_value(loan.status)
    data["documents_submitted"] = dict(loan.documents_submitted or {})
    for field in ("application_date", "approved_date", "disbursed_date", "closed_date", "created_at", "modified_at"):
        data[field] = isoformat_or_none(data.get(field))
    if applicant is not None:
        data["applicant"] = format_user_summary(applicant)
    return data


def format_card_type_response(card_type: MembershipCardType) -> dict:
    return {
        "id": card_type.id,
        "name": card_type.name,
        "description": card_type.description or "",
        "price": card_type.price,
        "validity_months": card_type.validity_months,
        "benefits_description": card_type.benefits_description or "",
        "loan_type_association": enum_value(card_type.loan_type_association),
        "max_loan_amount_benefit": card_type.max_loan_amount_benefit,
        "processing_time_benefit": card_type.processing_time_benefit or "",
        "is_active": card_type.is_active,
    }


def format_membership_card_response(card: MembershipCard, card_type: Optional[MembershipCardType] = None) -> dict:
    data = {
        "id": card.id,
        "user_id": card.user_id,
        "card_type_id": card.card_type_id,
        "purchase_date": isoformat_or_none(card.purchase_date),
        "expiry_date": isoformat_or_none(card.expiry_date),
        "payment_id": card.payment_id or "",
        "status": enum_value(card.status),
    }
    if card_type is not None:
        data["card_type"] = format_card_type_response(card_type)
    return data


def format_model_response(obj) -> dict:
    """Generic formatter for simple admin managed records (partners, plans, content, enquiries)."""
    data = to_dict(obj)
    data.pop("is_deleted", None)
    data.pop("deleted_at", None)
    for key, value in list(data.items()):
        if isinstance(value, datetime.datetime):
            data[key] = value.isoformat()
        else:
            data[key] = enum_value(value)
    return data


def pagination_meta(total_count: int, page: int, limit: int) -> dict:
    return {
        "total": total_count,
        "page": page,
        "limit": limit,
        "total_pages": ceil(total_count / limit) if limit else 0,
    }


class PasswordHashing:
    def __init__(self):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    # Hash password
    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    # Verify password
    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            return False
        return self.pwd_context.verify(plain_password, hashed_password)


def validate_file_type(file: UploadFile, allowed_types=None, message_key: str = "invalid_file_type"):
    if file.content_type not in (allowed_types or ALLOWED_DOCUMENT_CONTENT_TYPES):
        app_logger.warning(f"Rejected upload {file.filename} with content type {file.content_type}")
        raise ValidationError(message_key, file.content_type)


def validate_file_size(size: int, max_bytes: int = MAX_DOCUMENT_SIZE_BYTES, message_key: str = "file_too_large"):
    if size > max_bytes:
        raise ValidationError(message_key)
