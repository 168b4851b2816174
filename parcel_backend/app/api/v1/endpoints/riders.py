"""
Rider API Endpoints.

Applications, the admin approval workflow, and the rider's own delivery lists.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from parcel_backend.app.core.dependencies import (
    get_current_principal, get_dispatch_engine, get_rider_registry
)
from parcel_backend.app.core.guards import require_role
from parcel_backend.app.models.enums import RiderStatus, UserRole
from parcel_backend.app.schemas.parcel import ParcelResponse
from parcel_backend.app.schemas.rider import RiderApplication, RiderDecisionRequest, RiderResponse
from parcel_backend.app.services.dispatch import DispatchEngine
from parcel_backend.app.services.rider_registry import RiderRegistry

router = APIRouter(prefix="/riders", tags=["Riders"])
deliveries_router = APIRouter(prefix="/rider", tags=["Rider - Deliveries"])


@router.post("", response_model=RiderResponse, status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    application: RiderApplication,
    principal: dict = Depends(get_current_principal),
    riders: RiderRegistry = Depends(get_rider_registry)
):
    """File a rider application for the caller's email. Starts pending."""
    rider = await riders.apply(principal["email"], application.model_dump())
    return RiderResponse.model_validate(rider)


@router.get("/pending", response_model=List[RiderResponse])
async def list_pending_riders(
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    riders: RiderRegistry = Depends(get_rider_registry)
):
    """Approval queue, newest applications first (admin only)."""
    return [RiderResponse.model_validate(r) for r in await riders.list_pending()]


@router.get("", response_model=List[RiderResponse])
async def list_riders(
    status_filter: Optional[RiderStatus] = Query(None, alias="status"),
    name: Optional[str] = Query(None, description="Partial, case-insensitive name"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    riders: RiderRegistry = Depends(get_rider_registry)
):
    """Browse riders by status and name (admin only)."""
    results = await riders.list_by_status(status=status_filter, name=name)
    return [RiderResponse.model_validate(r) for r in results]


@router.patch("/{rider_id}", response_model=RiderResponse)
async def decide_rider(
    rider_id: int = Path(..., description="Rider ID"),
    decision: RiderDecisionRequest = ...,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    riders: RiderRegistry = Depends(get_rider_registry)
):
    """
    Approve or reject a pending application (admin only).

    Approval also promotes the applicant's account to the rider role; that
    step is best-effort and never fails this request.
    """
    rider = await riders.decide(rider_id, decision.status)
    return RiderResponse.model_validate(rider)


@router.patch("/{rider_id}/deactivate", response_model=RiderResponse)
async def deactivate_rider(
    rider_id: int = Path(..., description="Rider ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    riders: RiderRegistry = Depends(get_rider_registry)
):
    """Deactivate an approved rider (admin only)."""
    rider = await riders.deactivate(rider_id)
    return RiderResponse.model_validate(rider)


@deliveries_router.get("/parcels", response_model=List[ParcelResponse])
async def pending_deliveries(
    current_user: dict = Depends(require_role([UserRole.RIDER])),
    dispatch: DispatchEngine = Depends(get_dispatch_engine)
):
    """
    Assigned and in-transit parcels of the calling rider.

    404 with ERR_NO_CONTENT when there are none.
    """
    parcels = await dispatch.pending_for_rider(current_user["email"])
    return [ParcelResponse.model_validate(p) for p in parcels]


@deliveries_router.get("/delivered-parcels", response_model=List[ParcelResponse])
async def delivered_parcels(
    current_user: dict = Depends(require_role([UserRole.RIDER])),
    dispatch: DispatchEngine = Depends(get_dispatch_engine)
):
    """Parcels the calling rider has delivered."""
    parcels = await dispatch.delivered_for_rider(current_user["email"])
    return [ParcelResponse.model_validate(p) for p in parcels]
