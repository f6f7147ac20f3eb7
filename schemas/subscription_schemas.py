from typing import Optional, List

from pydantic import BaseModel, Field, confloat, conint

from schemas.membership_schemas import PaymentConfirmation


class SubscriptionPurchaseRequest(PaymentConfirmation):
    plan_id: int


class SubscriptionPlanCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    price: confloat(ge=0)
    duration_days: conint(ge=1, le=3650)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True


class SubscriptionPlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    price: Optional[confloat(ge=0)] = None
    duration_days: Optional[conint(ge=1, le=3650)] = None
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None
