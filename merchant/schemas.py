"""
Request schemas for restaurant management and discovery.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from order.schemas import OrderStatus


class RestaurantAddress(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field("", max_length=20)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    description: str = ""
    address: RestaurantAddress
    phone: str = Field(..., min_length=6, max_length=20)
    email: Optional[EmailStr] = None
    business_license: str = Field("", max_length=100)
    delivery_radius_km: float = Field(5, gt=0, le=50)
    minimum_order: Decimal = Field(Decimal("15000"), ge=0)
    delivery_fee: Decimal = Field(Decimal("5000"), ge=0)
    average_preparation_time: int = Field(20, ge=1, le=240)
    image_url: str = Field("", max_length=255)
    banner_url: str = Field("", max_length=255)


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    description: Optional[str] = None
    address: Optional[RestaurantAddress] = None
    phone: Optional[str] = Field(None, min_length=6, max_length=20)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None
    delivery_radius_km: Optional[float] = Field(None, gt=0, le=50)
    minimum_order: Optional[Decimal] = Field(None, ge=0)
    delivery_fee: Optional[Decimal] = Field(None, ge=0)
    average_preparation_time: Optional[int] = Field(None, ge=1, le=240)
    image_url: Optional[str] = Field(None, max_length=255)
    banner_url: Optional[str] = Field(None, max_length=255)


class RestaurantSearch(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: Optional[float] = Field(None, gt=0, le=100)
    city: Optional[str] = None
    search: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @model_validator(mode="after")
    def coordinates_come_in_pairs(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class RestaurantOrdersQuery(BaseModel):
    status: Optional[OrderStatus] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class AnalyticsQuery(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def range_is_ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self
