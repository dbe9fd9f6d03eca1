"""
Request schemas for delivery partner endpoints.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class AvailableOrdersQuery(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: float = Field(10, gt=0, le=100)

    @model_validator(mode="after")
    def coordinates_come_in_pairs(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class LocationUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class OnlineStatusUpdate(BaseModel):
    is_active: bool


class EarningsQuery(BaseModel):
    period: Literal["today", "week", "month", "all"] = "today"


class CompletedQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
