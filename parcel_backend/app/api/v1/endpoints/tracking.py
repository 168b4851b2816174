"""
Tracking API Endpoints.
"""

from fastapi import APIRouter, Depends, status
from parcel_backend.app.core.dependencies import get_parcel_store, get_tracking_ledger
from parcel_backend.app.core.guards import require_role, ParcelAccessGuard, ALL_ROLES
from parcel_backend.app.schemas.tracking import TrackingCreate, TrackingEventResponse
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.tracking import TrackingLedger

router = APIRouter(prefix="/tracking", tags=["Tracking"])
parcel_guard = ParcelAccessGuard()


@router.post("", response_model=TrackingEventResponse, status_code=status.HTTP_201_CREATED)
async def add_tracking_event(
    event_data: TrackingCreate,
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store),
    ledger: TrackingLedger = Depends(get_tracking_ledger)
):
    """
    Append an event to a parcel's history.

    Limited to the parcel's creator, its assigned rider and admins. The caller
    is recorded as the actor; the parcel's own tracking id is used when none
    is given.
    """
    parcel = await parcels.get(event_data.parcel_id)
    parcel_guard.enforce(parcel, current_user)

    event = await ledger.record(
        parcel_id=parcel.id,
        tracking_id=event_data.tracking_id or parcel.tracking_id,
        status=event_data.status,
        message=event_data.message,
        update_by=current_user["email"],
    )
    return TrackingEventResponse.model_validate(event)
