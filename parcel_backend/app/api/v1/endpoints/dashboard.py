"""
Dashboard API Endpoints.

Read-only aggregates for each role.
"""

from typing import List
from fastapi import APIRouter, Depends

from parcel_backend.app.core.dependencies import get_analytics_service
from parcel_backend.app.core.guards import require_role
from parcel_backend.app.models.enums import UserRole
from parcel_backend.app.schemas.analytics import RiderStatusCount, UserSummary, AdminSummary
from parcel_backend.app.services.analytics import AnalyticsService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/rider/status-count", response_model=List[RiderStatusCount])
async def get_rider_status_count(
    current_user: dict = Depends(require_role([UserRole.RIDER])),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Calling rider's parcels grouped by delivery status."""
    return await analytics.rider_status_count(current_user["email"])


@router.get("/user/summary", response_model=UserSummary)
async def get_user_summary(
    current_user: dict = Depends(require_role([UserRole.USER])),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Totals over the calling user's parcels."""
    return await analytics.user_summary(current_user["email"])


@router.get("/admin/summary", response_model=AdminSummary)
async def get_admin_summary(
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Fleet-wide counters."""
    return await analytics.admin_summary()
