"""
Dashboard aggregate schemas.
"""

from pydantic import BaseModel
from parcel_backend.app.models.enums import DeliveryStatus


class RiderStatusCount(BaseModel):
    """One bucket of a rider's parcels grouped by delivery status."""
    status: DeliveryStatus
    count: int


class UserSummary(BaseModel):
    """Dashboard stats for users."""
    total_created: int = 0
    total_unpaid: int = 0
    total_delivered: int = 0
    total_cost_paid: float = 0.0


class AdminSummary(BaseModel):
    """System-wide stats for admins. total_earn is not computed yet."""
    total_active_riders: int
    total_not_assigned_parcels: int
    total_delivered: int
    total_earn: float = 0.0
