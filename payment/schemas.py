"""
Request schemas for payments.
"""
from typing import Optional

from pydantic import BaseModel, Field

from order.schemas import PaymentMethod


class ProcessPaymentRequest(BaseModel):
    order_id: int
    payment_method: Optional[PaymentMethod] = None


class VerifyPaymentQuery(BaseModel):
    transaction_id: str = Field(..., min_length=1, max_length=64)
