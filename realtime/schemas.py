"""
Body schemas for the realtime room endpoints.
"""
from typing import Literal

from pydantic import BaseModel


class RoomRequest(BaseModel):
    scope: Literal["order", "restaurant", "delivery"]
    id: int
