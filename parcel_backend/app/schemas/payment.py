"""
Payment Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from parcel_backend.app.models.enums import PaymentRecordStatus


class PaymentCreate(BaseModel):
    """Confirmation of a charge completed out of band with the gateway."""
    parcel_id: int
    amount: float = Field(..., gt=0)
    transaction_id: str = Field(..., min_length=1, max_length=255)
    payment_method: Optional[str] = Field(None, max_length=50)


class PaymentResponse(BaseModel):
    id: int
    parcel_id: int
    email: str
    amount: float
    transaction_id: str
    payment_method: Optional[str]
    status: PaymentRecordStatus
    paid_at: datetime

    class Config:
        from_attributes = True


class PaymentRecordedResponse(BaseModel):
    message: str
    payment: PaymentResponse


class PaymentIntentRequest(BaseModel):
    amount_in_cents: int = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    client_secret: str
