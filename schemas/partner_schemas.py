from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr

PHONE_PATTERN = r"^\+?\d{10,15}$"


class BankPartnerCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    logo_url: Optional[str] = Field(None, max_length=500)
    contact_person_name: Optional[str] = Field(None, max_length=255)
    contact_person_email: Optional[EmailStr] = None
    contact_person_phone: Optional[constr(pattern=PHONE_PATTERN)] = None
    is_active: bool = True


class BankPartnerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    logo_url: Optional[str] = Field(None, max_length=500)
    contact_person_name: Optional[str] = Field(None, max_length=255)
    contact_person_email: Optional[EmailStr] = None
    contact_person_phone: Optional[constr(pattern=PHONE_PATTERN)] = None
    is_active: Optional[bool] = None
