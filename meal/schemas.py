"""
Request schemas for menu management.
"""
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SpiceLevelName = Literal["mild", "medium", "spicy", "extra_spicy"]
MenuCategory = Literal["seblak_kerupuk", "seblak_mie", "seblak_ceker", "seblak_sosis", "seblak_seafood"]
ToppingCategory = Literal["protein", "vegetable", "noodle", "extra"]


class SpiceLevelIn(BaseModel):
    level: SpiceLevelName
    name: str = Field("", max_length=50)
    price_adjustment: Decimal = Field(Decimal("0"), ge=0)


class ToppingIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    category: ToppingCategory
    is_available: bool = True


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    base_price: Decimal = Field(..., gt=0)
    category: MenuCategory
    is_available: bool = True
    image_url: str = Field("", max_length=255)
    preparation_time: int = Field(15, ge=1, le=240)
    spice_levels: List[SpiceLevelIn] = Field(default_factory=list)
    toppings: List[ToppingIn] = Field(default_factory=list)


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, gt=0)
    category: Optional[MenuCategory] = None
    is_available: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=255)
    preparation_time: Optional[int] = Field(None, ge=1, le=240)
    spice_levels: Optional[List[SpiceLevelIn]] = None
    toppings: Optional[List[ToppingIn]] = None
