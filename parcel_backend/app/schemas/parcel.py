"""
Parcel Pydantic schemas.

Defines request and response models for parcel management and dispatch.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from parcel_backend.app.models.enums import DeliveryStatus, PaymentStatus, ParcelType


class ParcelCreate(BaseModel):
    """Schema for creating a new parcel. created_by comes from the token."""
    title: str = Field(..., min_length=1, max_length=200, description="Short description of the shipment")
    parcel_type: ParcelType = Field(default=ParcelType.NON_DOCUMENT)
    weight_kg: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    cost: float = Field(..., ge=0, description="Delivery cost quoted to the user")
    tracking_id: Optional[str] = Field(None, min_length=1, max_length=50)

    sender_name: Optional[str] = Field(None, max_length=150)
    sender_contact: Optional[str] = Field(None, max_length=50)
    sender_region: Optional[str] = Field(None, max_length=100)
    sender_address: Optional[str] = Field(None, max_length=500)

    receiver_name: Optional[str] = Field(None, max_length=150)
    receiver_contact: Optional[str] = Field(None, max_length=50)
    receiver_region: Optional[str] = Field(None, max_length=100)
    receiver_address: Optional[str] = Field(None, max_length=500)


class AssignedRider(BaseModel):
    """Point-in-time copy of the rider's identity fields."""
    rider_id: int
    name: str
    email: str
    contact: Optional[str] = None
    region: Optional[str] = None


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: int
    tracking_id: str
    created_by: str
    title: str
    parcel_type: ParcelType
    weight_kg: Optional[float]
    sender_name: Optional[str]
    sender_contact: Optional[str]
    sender_region: Optional[str]
    sender_address: Optional[str]
    receiver_name: Optional[str]
    receiver_contact: Optional[str]
    receiver_region: Optional[str]
    receiver_address: Optional[str]
    cost: float
    payment_status: PaymentStatus
    delivery_status: DeliveryStatus
    assigned_rider: Optional[AssignedRider]
    creation_date: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeliveryStatusUpdate(BaseModel):
    """Schema for moving a parcel's delivery status."""
    delivery_status: DeliveryStatus


class RiderAssignment(BaseModel):
    """Schema for assigning a rider to a parcel."""
    rider_id: int


class RiderAssignmentResponse(BaseModel):
    """Response after rider assignment."""
    success: bool
    message: str
    parcel_id: int
    delivery_status: DeliveryStatus
    assigned_rider: AssignedRider


class ParcelStatusResponse(BaseModel):
    """Response after a delivery status change."""
    success: bool
    parcel: ParcelResponse


class ParcelDeleteResponse(BaseModel):
    message: str
    parcel_id: int


class ParcelListResponse(BaseModel):
    """Schema for a parcel listing."""
    parcels: List[ParcelResponse]
    total: int
