"""
Dispatch Engine.

Guarded entry point for every delivery-status change:

    not_collected -> assigned -> transit -> delivered

Rider assignment is the only way into ``assigned``. Later moves only go
forward. Admins get a separate, explicit override for corrections.

Concurrency note: checks read the parcel and the write matches on id only,
so two concurrent assignments to the same parcel are last-writer-wins.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from parcel_backend.app.core.exceptions import (
    InsufficientPermissionsError,
    InvalidTransitionError,
    NoContentError,
    RiderNotAssignableError,
)
from parcel_backend.app.models.enums import (
    DELIVERY_SEQUENCE,
    DeliveryStatus,
    PaymentStatus,
    PENDING_DELIVERY_STATUSES,
    RIDER_BEARING_STATUSES,
    RiderStatus,
    UserRole,
)
from parcel_backend.app.models.parcel import Parcel
from parcel_backend.app.models.rider import Rider
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.rider_registry import RiderRegistry
from parcel_backend.app.services.tracking import TrackingLedger, TrackingStatus

logger = logging.getLogger("parcel_backend.dispatch")

# Parcels may be (re)assigned only before pickup
ASSIGNABLE_STATUSES = (DeliveryStatus.NOT_COLLECTED, DeliveryStatus.ASSIGNED)

TRACKING_STATUS_FOR = {
    DeliveryStatus.TRANSIT: TrackingStatus.TRANSIT,
    DeliveryStatus.DELIVERED: TrackingStatus.DELIVERED,
}


def rider_snapshot(rider: Rider) -> Dict[str, Any]:
    """Copy the identity fields a parcel keeps about its rider."""
    return {
        "rider_id": rider.id,
        "name": rider.name,
        "email": rider.email,
        "contact": rider.contact,
        "region": rider.region,
    }


def parse_delivery_status(value: Union[str, DeliveryStatus]) -> DeliveryStatus:
    try:
        return DeliveryStatus(value)
    except ValueError:
        raise InvalidTransitionError(
            f"Unknown delivery status '{value}'",
            target=str(value),
        )


class DispatchEngine:

    def __init__(self, parcels: ParcelStore, riders: RiderRegistry, ledger: TrackingLedger):
        self.parcels = parcels
        self.riders = riders
        self.ledger = ledger

    async def assign_rider(self, parcel_id: int, rider_id: int, actor: str = "") -> Dict[str, Any]:
        """
        Bind an approved rider to a paid parcel that has not been picked up.

        Raises:
            ResourceNotFoundError: rider or parcel missing (nothing is mutated)
            RiderNotAssignableError: rider is pending, rejected or deactivated
            InvalidTransitionError: parcel unpaid or already picked up
        """
        rider = await self.riders.get(rider_id)
        if rider.status != RiderStatus.APPROVED:
            raise RiderNotAssignableError(rider.id, rider.status.value)

        parcel = await self.parcels.get(parcel_id)
        if parcel.payment_status != PaymentStatus.PAID:
            raise InvalidTransitionError(
                "Parcel must be paid before a rider can be assigned",
                current=parcel.delivery_status.value,
                target=DeliveryStatus.ASSIGNED.value,
            )
        if parcel.delivery_status not in ASSIGNABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot assign a rider to a parcel that is {parcel.delivery_status.value}",
                current=parcel.delivery_status.value,
                target=DeliveryStatus.ASSIGNED.value,
            )

        snapshot = rider_snapshot(rider)
        parcel = await self.parcels.set_assigned_rider(parcel_id, snapshot)
        await self.ledger.record(
            parcel_id=parcel.id,
            tracking_id=parcel.tracking_id,
            status=TrackingStatus.RIDER_ASSIGNED,
            message=f"Assigned to rider {rider.name}",
            update_by=actor,
        )
        logger.info("Parcel %s assigned to rider %s by %s", parcel.id, rider.id, actor or "system")

        return {
            "success": True,
            "message": "Rider assigned successfully",
            "parcel_id": parcel.id,
            "delivery_status": parcel.delivery_status,
            "assigned_rider": snapshot,
        }

    async def update_delivery_status(
        self,
        parcel_id: int,
        status: Union[str, DeliveryStatus],
        actor: str = "",
        actor_role: Optional[UserRole] = None,
    ) -> Parcel:
        """
        Move a parcel strictly forward.

        A rider may only move parcels assigned to them. Entering ASSIGNED is
        only possible through assign_rider.
        """
        target = parse_delivery_status(status)
        parcel = await self.parcels.get(parcel_id)
        current = parcel.delivery_status

        if actor_role == UserRole.RIDER and parcel.assigned_rider_email != actor:
            raise InsufficientPermissionsError("Parcel is not assigned to you")

        if DELIVERY_SEQUENCE[target] <= DELIVERY_SEQUENCE[current]:
            raise InvalidTransitionError(
                f"Delivery status can only move forward (from {current.value} to {target.value})",
                current=current.value,
                target=target.value,
            )
        if target == DeliveryStatus.ASSIGNED or current == DeliveryStatus.NOT_COLLECTED:
            raise InvalidTransitionError(
                "A rider must be assigned before the parcel can move",
                current=current.value,
                target=target.value,
            )

        parcel = await self.parcels.update_delivery_status(parcel_id, target)
        await self.ledger.record(
            parcel_id=parcel.id,
            tracking_id=parcel.tracking_id,
            status=TRACKING_STATUS_FOR[target],
            update_by=actor,
        )
        logger.info("Parcel %s moved %s -> %s by %s", parcel.id, current.value, target.value, actor or "system")
        return parcel

    async def override_delivery_status(
        self,
        parcel_id: int,
        status: Union[str, DeliveryStatus],
        actor: str = "",
    ) -> Parcel:
        """
        Admin correction: set any status, backwards included.

        Going back to NOT_COLLECTED drops the rider snapshot. A rider-bearing
        status still requires a snapshot to be present.
        """
        target = parse_delivery_status(status)
        parcel = await self.parcels.get(parcel_id)
        previous = parcel.delivery_status

        if target == DeliveryStatus.NOT_COLLECTED:
            parcel = await self.parcels.clear_assigned_rider(parcel_id)
        elif target in RIDER_BEARING_STATUSES and parcel.assigned_rider_id is None:
            raise InvalidTransitionError(
                "Cannot set a rider-bearing status on a parcel without an assigned rider",
                current=previous.value,
                target=target.value,
            )
        else:
            parcel = await self.parcels.update_delivery_status(parcel_id, target)

        await self.ledger.record(
            parcel_id=parcel.id,
            tracking_id=parcel.tracking_id,
            status=TrackingStatus.STATUS_OVERRIDE,
            message=f"{previous.value} -> {target.value}",
            update_by=actor,
        )
        logger.warning("Parcel %s status overridden %s -> %s by %s", parcel.id, previous.value, target.value, actor)
        return parcel

    async def pending_for_rider(self, email: str) -> List[Parcel]:
        """Assigned or in-transit parcels for a rider; none at all is a NoContentError."""
        parcels = await self.parcels.list_for_rider(email, PENDING_DELIVERY_STATUSES)
        if not parcels:
            raise NoContentError("No pending deliveries found")
        return parcels

    async def delivered_for_rider(self, email: str) -> List[Parcel]:
        return await self.parcels.list_for_rider(email, (DeliveryStatus.DELIVERED,))
