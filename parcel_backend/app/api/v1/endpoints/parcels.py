"""
Parcel API Endpoints.

Creation and browsing for users, dispatch and delivery-status changes for
admins and riders.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from parcel_backend.app.core.dependencies import (
    get_dispatch_engine, get_parcel_store, get_tracking_ledger
)
from parcel_backend.app.core.guards import require_role, ParcelAccessGuard, ALL_ROLES
from parcel_backend.app.models.enums import DeliveryStatus, PaymentStatus, UserRole
from parcel_backend.app.schemas.parcel import (
    ParcelCreate, ParcelResponse, ParcelListResponse, ParcelDeleteResponse,
    ParcelStatusResponse, DeliveryStatusUpdate, RiderAssignment, RiderAssignmentResponse
)
from parcel_backend.app.schemas.tracking import TrackingEventResponse
from parcel_backend.app.services.dispatch import DispatchEngine
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.tracking import TrackingLedger, TrackingStatus

router = APIRouter(prefix="/parcels", tags=["Parcels"])
admin_router = APIRouter(prefix="/admin/parcels", tags=["Admin - Parcels"])
parcel_guard = ParcelAccessGuard()


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store),
    ledger: TrackingLedger = Depends(get_tracking_ledger)
):
    """
    Create a parcel owned by the caller.

    Starts unpaid and not collected.
    """
    data = parcel_data.model_dump(exclude_none=True)
    data["created_by"] = current_user["email"]

    parcel = await parcels.create(data)
    await ledger.record(
        parcel_id=parcel.id,
        tracking_id=parcel.tracking_id,
        status=TrackingStatus.PARCEL_CREATED,
        update_by=current_user["email"],
    )
    return ParcelResponse.model_validate(parcel)


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    email: Optional[str] = Query(None, description="Creator email"),
    payment_status: Optional[PaymentStatus] = Query(None),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store)
):
    """
    List parcels, newest first.

    Non-admins only ever see parcels they created.
    """
    created_by = parcel_guard.scope_email(current_user, email)
    results = await parcels.list_by_filter(
        created_by=created_by,
        payment_status=payment_status,
        delivery_status=delivery_status,
    )
    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in results],
        total=len(results)
    )


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store)
):
    """Parcel details for its creator, its rider or an admin."""
    parcel = await parcels.get(parcel_id)
    parcel_guard.enforce(parcel, current_user)
    return ParcelResponse.model_validate(parcel)


@router.delete("/{parcel_id}", response_model=ParcelDeleteResponse)
async def delete_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    parcels: ParcelStore = Depends(get_parcel_store)
):
    """Remove a parcel (admin only). Payment and tracking history is kept."""
    await parcels.delete(parcel_id)
    return ParcelDeleteResponse(message="Parcel deleted successfully", parcel_id=parcel_id)


@router.patch("/{parcel_id}/assign-rider", response_model=RiderAssignmentResponse)
async def assign_rider(
    parcel_id: int = Path(..., description="Parcel ID"),
    assignment: RiderAssignment = ...,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    dispatch: DispatchEngine = Depends(get_dispatch_engine)
):
    """
    Assign an approved rider to a paid parcel (admin only).

    Validates:
    - Rider exists and is approved
    - Parcel exists, is paid and has not been picked up
    """
    result = await dispatch.assign_rider(parcel_id, assignment.rider_id, actor=current_user["email"])
    return RiderAssignmentResponse(**result)


@router.patch("/{parcel_id}/status", response_model=ParcelStatusResponse)
async def update_delivery_status(
    parcel_id: int = Path(..., description="Parcel ID"),
    status_data: DeliveryStatusUpdate = ...,
    current_user: dict = Depends(require_role([UserRole.RIDER, UserRole.ADMIN])),
    dispatch: DispatchEngine = Depends(get_dispatch_engine)
):
    """
    Move a parcel forward (assigned -> transit -> delivered).

    Riders may only move parcels assigned to them.
    """
    parcel = await dispatch.update_delivery_status(
        parcel_id,
        status_data.delivery_status,
        actor=current_user["email"],
        actor_role=current_user["role"],
    )
    return ParcelStatusResponse(success=True, parcel=ParcelResponse.model_validate(parcel))


@router.patch("/{parcel_id}/status/override", response_model=ParcelStatusResponse)
async def override_delivery_status(
    parcel_id: int = Path(..., description="Parcel ID"),
    status_data: DeliveryStatusUpdate = ...,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    dispatch: DispatchEngine = Depends(get_dispatch_engine)
):
    """Correct a parcel's status in any direction (admin only)."""
    parcel = await dispatch.override_delivery_status(
        parcel_id, status_data.delivery_status, actor=current_user["email"]
    )
    return ParcelStatusResponse(success=True, parcel=ParcelResponse.model_validate(parcel))


@router.get("/{parcel_id}/tracking", response_model=List[TrackingEventResponse])
async def get_parcel_tracking(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store),
    ledger: TrackingLedger = Depends(get_tracking_ledger)
):
    """Tracking history of a parcel, oldest event first."""
    parcel = await parcels.get(parcel_id)
    parcel_guard.enforce(parcel, current_user)
    events = await ledger.history(parcel_id)
    return [TrackingEventResponse.model_validate(e) for e in events]


@admin_router.get("/status", response_model=List[ParcelResponse])
async def list_paid_parcels(
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    parcels: ParcelStore = Depends(get_parcel_store)
):
    """Paid parcels in every delivery status, most recently updated first (admin only)."""
    results = await parcels.list_paid_for_admin()
    return [ParcelResponse.model_validate(p) for p in results]
