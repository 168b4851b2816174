"""
Rider Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from parcel_backend.app.models.enums import RiderDecision, RiderStatus


class RiderApplication(BaseModel):
    """Schema for a rider application. The email comes from the token."""
    name: str = Field(..., min_length=1, max_length=150)
    age: Optional[int] = Field(None, ge=18, le=100)
    region: str = Field(..., min_length=1, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    contact: str = Field(..., min_length=3, max_length=50)
    nid: Optional[str] = Field(None, max_length=50)
    bike_brand: Optional[str] = Field(None, max_length=100)
    bike_registration: Optional[str] = Field(None, max_length=100)


class RiderDecisionRequest(BaseModel):
    """Admin decision on a pending application."""
    status: RiderDecision


class RiderResponse(BaseModel):
    id: int
    email: str
    name: str
    age: Optional[int]
    region: str
    district: Optional[str]
    contact: str
    nid: Optional[str]
    bike_brand: Optional[str]
    bike_registration: Optional[str]
    status: RiderStatus
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
