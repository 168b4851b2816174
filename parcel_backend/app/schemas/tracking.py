"""
Tracking Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class TrackingCreate(BaseModel):
    parcel_id: int
    tracking_id: Optional[str] = Field(None, max_length=50)
    status: str = Field(..., min_length=1, max_length=50)
    message: Optional[str] = Field(None, max_length=500)


class TrackingEventResponse(BaseModel):
    id: int
    parcel_id: int
    tracking_id: Optional[str]
    status: str
    message: Optional[str]
    update_by: str
    created_at: datetime

    class Config:
        from_attributes = True
