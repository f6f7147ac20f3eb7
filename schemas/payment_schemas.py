from pydantic import BaseModel

from common.enums import OrderType


class CreateOrderRequest(BaseModel):
    type: OrderType
    item_id: int
