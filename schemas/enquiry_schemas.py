from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr

from common.enums import EnquiryStatus


class EnquiryCreateSchema(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone_number: Optional[constr(pattern=r"^\+?\d{10,15}$")] = None
    subject: str = Field(..., min_length=2, max_length=255)
    message: str = Field(..., min_length=5)


class EnquiryStatusUpdateSchema(BaseModel):
    status: EnquiryStatus
