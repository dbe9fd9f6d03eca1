"""
Request schemas for sign-in and profile maintenance.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from register.schemas import PHONE_PATTERN, AddressIn, DeliveryInfoIn


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class BusinessInfoIn(BaseModel):
    business_license: Optional[str] = Field(None, max_length=100)
    tax_number: Optional[str] = Field(None, max_length=50)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=120)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    profile_image: Optional[str] = Field(None, max_length=255)
    address: Optional[AddressIn] = None
    delivery_info: Optional[DeliveryInfoIn] = None
    business_info: Optional[BusinessInfoIn] = None


class FcmTokenUpdate(BaseModel):
    fcm_token: str = Field(..., min_length=1, max_length=255)
