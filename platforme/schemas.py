"""
Query and body schemas for the admin endpoints.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from order.schemas import OrderStatus


class AdminOrdersQuery(BaseModel):
    status: Optional[OrderStatus] = None
    restaurant_id: Optional[int] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class RecentOrdersQuery(BaseModel):
    limit: int = Field(10, ge=1, le=50)


class RevenueQuery(BaseModel):
    days: int = Field(7, ge=1, le=90)


class TopRestaurantsQuery(BaseModel):
    limit: int = Field(5, ge=1, le=50)


class AdminRestaurantsQuery(BaseModel):
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class AdminUsersQuery(BaseModel):
    role: Optional[Literal["customer", "restaurant_owner", "delivery_partner"]] = None
    is_active: Optional[bool] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class DeliveryPartnersQuery(BaseModel):
    is_active: Optional[bool] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class ModerationRequest(BaseModel):
    reason: str = Field("", max_length=255)


class AssignPartnerRequest(BaseModel):
    delivery_partner_id: int
