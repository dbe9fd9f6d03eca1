"""
Request schemas for account registration and phone verification.
"""
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

PHONE_PATTERN = r"^\+?[0-9]{9,15}$"


class AddressIn(BaseModel):
    street: str = Field("", max_length=255)
    city: str = Field("", max_length=100)
    province: str = Field("", max_length=100)
    postal_code: str = Field("", max_length=20)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class DeliveryInfoIn(BaseModel):
    vehicle_type: Optional[Literal["motorcycle", "bicycle", "car"]] = None
    vehicle_number: Optional[str] = Field(None, max_length=30)
    license_number: Optional[str] = Field(None, max_length=50)


class RegisterRequest(BaseModel):
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=2, max_length=120)
    role: Literal["customer", "restaurant_owner", "delivery_partner"] = "customer"
    address: Optional[AddressIn] = None
    delivery_info: Optional[DeliveryInfoIn] = None
    business_license: str = Field("", max_length=100)
    tax_number: str = Field("", max_length=50)


class AvailabilityQuery(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class SendOtpRequest(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)


class VerifyOtpRequest(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)
    code: str = Field(..., pattern=r"^[0-9]{6}$")
