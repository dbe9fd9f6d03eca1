"""
Request schemas for placing and managing orders.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from meal.schemas import SpiceLevelName
from order.pricing import LineRequest, ToppingRequest

OrderStatus = Literal[
    "pending", "confirmed", "preparing", "ready_for_pickup", "picked_up",
    "on_the_way", "delivered", "cancelled", "refunded",
]
PaymentMethod = Literal["qris", "gopay", "ovo", "dana", "bank_transfer", "cash"]


class ToppingSelection(BaseModel):
    topping_id: int
    quantity: int = Field(1, ge=1, le=20)


class OrderLine(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1, le=50)
    spice_level: SpiceLevelName = "medium"
    toppings: List[ToppingSelection] = Field(default_factory=list)
    special_instructions: str = Field("", max_length=255)

    def to_request(self):
        return LineRequest(
            menu_item_id=self.menu_item_id,
            quantity=self.quantity,
            spice_level=self.spice_level,
            toppings=[ToppingRequest(topping_id=t.topping_id, quantity=t.quantity) for t in self.toppings],
            special_instructions=self.special_instructions,
        )


class DeliveryAddress(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    notes: str = Field("", max_length=255)


class OrderCreate(BaseModel):
    restaurant_id: int
    items: List[OrderLine] = Field(..., min_length=1)
    delivery_address: DeliveryAddress
    payment_method: PaymentMethod
    customer_name: Optional[str] = Field(None, max_length=120)
    customer_phone: Optional[str] = Field(None, max_length=20)
    promo_code: Optional[str] = Field(None, max_length=30)
    special_instructions: str = ""


class StatusUpdate(BaseModel):
    status: OrderStatus
    reason: Optional[str] = Field(None, max_length=255)
    notes: str = Field("", max_length=255)


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=5, max_length=255)


class RatingCreate(BaseModel):
    food: int = Field(..., ge=1, le=5)
    delivery: int = Field(..., ge=1, le=5)
    overall: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=1000)


class OrderListQuery(BaseModel):
    status: Optional[OrderStatus] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
