"""
Parcel Store.

Low-level persistence primitives for parcel documents. Every mutation is a
single-row UPDATE committed on its own; none of them validate lifecycle
transitions. The guarded entry points live in the dispatch engine and the
payment reconciler.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_backend.app.core.exceptions import InvalidInputError, ResourceNotFoundError
from parcel_backend.app.models.enums import (
    DeliveryStatus,
    PaymentStatus,
    RIDER_BEARING_STATUSES,
)
from parcel_backend.app.models.parcel import Parcel

logger = logging.getLogger("parcel_backend.parcels")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_tracking_id(now: Optional[datetime] = None) -> str:
    """Tracking ids look like PCL-20250101-1A2B3C4D."""
    now = now or utcnow()
    return f"PCL-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


SNAPSHOT_FIELDS = {
    "rider_id": "assigned_rider_id",
    "name": "assigned_rider_name",
    "email": "assigned_rider_email",
    "contact": "assigned_rider_contact",
    "region": "assigned_rider_region",
}


def snapshot_columns(snapshot: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Map a rider snapshot (or None) onto the parcel's flat snapshot columns."""
    snapshot = snapshot or {}
    return {column: snapshot.get(key) for key, column in SNAPSHOT_FIELDS.items()}


class ParcelStore:
    """Parcel persistence over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any]) -> Parcel:
        """
        Insert a parcel.

        Defaults creation_date, payment_status, delivery_status and tracking_id
        unless the caller supplied them.

        Raises:
            InvalidInputError: empty payload, or a delivery status that does not
                agree with the presence of an assigned rider snapshot
        """
        if not data:
            raise InvalidInputError("Parcel data is required")

        values = dict(data)
        snapshot = values.pop("assigned_rider", None)
        now = utcnow()
        values.setdefault("creation_date", now)
        values.setdefault("updated_at", values["creation_date"])
        values.setdefault("payment_status", PaymentStatus.UNPAID)
        values.setdefault("delivery_status", DeliveryStatus.NOT_COLLECTED)
        if not values.get("tracking_id"):
            values["tracking_id"] = generate_tracking_id(now)

        try:
            values["delivery_status"] = DeliveryStatus(values["delivery_status"])
            values["payment_status"] = PaymentStatus(values["payment_status"])
        except ValueError as e:
            raise InvalidInputError(str(e))

        if (values["delivery_status"] in RIDER_BEARING_STATUSES) != (snapshot is not None):
            raise InvalidInputError(
                "assigned_rider must be present exactly when the parcel is assigned, in transit or delivered",
                details={"delivery_status": values["delivery_status"]}
            )
        values.update(snapshot_columns(snapshot))

        parcel = Parcel(**values)
        self.db.add(parcel)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise InvalidInputError(
                "Tracking id is already in use",
                details={"tracking_id": values["tracking_id"]}
            )
        await self.db.refresh(parcel)

        logger.info("Parcel %s created by %s", parcel.id, parcel.created_by)
        return parcel

    async def get(self, parcel_id: int) -> Parcel:
        """Raises ResourceNotFoundError when absent."""
        result = await self.db.execute(
            select(Parcel)
            .where(Parcel.id == parcel_id)
            .execution_options(populate_existing=True)
        )
        parcel = result.scalar_one_or_none()
        if not parcel:
            raise ResourceNotFoundError("Parcel", parcel_id)
        return parcel

    async def list_by_filter(
        self,
        created_by: Optional[str] = None,
        payment_status: Optional[PaymentStatus] = None,
        delivery_status: Optional[DeliveryStatus] = None,
    ) -> List[Parcel]:
        """Parcels matching every given filter, newest creation first."""
        query = select(Parcel)
        if created_by:
            query = query.where(Parcel.created_by == created_by)
        if payment_status:
            query = query.where(Parcel.payment_status == payment_status)
        if delivery_status:
            query = query.where(Parcel.delivery_status == delivery_status)

        result = await self.db.execute(query.order_by(Parcel.creation_date.desc(), Parcel.id.desc()))
        return list(result.scalars().all())

    async def list_for_rider(self, email: str, statuses) -> List[Parcel]:
        """Parcels whose snapshot carries this rider email, most recently updated first."""
        result = await self.db.execute(
            select(Parcel)
            .where(
                Parcel.assigned_rider_email == email,
                Parcel.delivery_status.in_(list(statuses)),
            )
            .order_by(Parcel.updated_at.desc(), Parcel.id.desc())
        )
        return list(result.scalars().all())

    async def list_paid_for_admin(self) -> List[Parcel]:
        """Paid parcels in any delivery status, most recently updated first."""
        result = await self.db.execute(
            select(Parcel)
            .where(
                Parcel.payment_status == PaymentStatus.PAID,
                Parcel.delivery_status.in_(list(DeliveryStatus)),
            )
            .order_by(Parcel.updated_at.desc(), Parcel.id.desc())
        )
        return list(result.scalars().all())

    async def _update_one(self, parcel_id: int, values: Dict[str, Any]) -> None:
        """Match-then-set on a single row; zero rows matched is a NotFound."""
        result = await self.db.execute(
            update(Parcel).where(Parcel.id == parcel_id).values(**values)
        )
        await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("Parcel", parcel_id)

    async def update_delivery_status(self, parcel_id: int, status: DeliveryStatus) -> Parcel:
        """Unconditional status set plus updated_at refresh."""
        await self._update_one(parcel_id, {"delivery_status": status, "updated_at": utcnow()})
        return await self.get(parcel_id)

    async def set_assigned_rider(self, parcel_id: int, snapshot: Dict[str, Any]) -> Parcel:
        """Write the rider snapshot and mark the parcel assigned."""
        values = snapshot_columns(snapshot)
        values.update(delivery_status=DeliveryStatus.ASSIGNED, updated_at=utcnow())
        await self._update_one(parcel_id, values)
        return await self.get(parcel_id)

    async def clear_assigned_rider(self, parcel_id: int) -> Parcel:
        """Drop the snapshot and return the parcel to NOT_COLLECTED."""
        values = snapshot_columns(None)
        values.update(delivery_status=DeliveryStatus.NOT_COLLECTED, updated_at=utcnow())
        await self._update_one(parcel_id, values)
        return await self.get(parcel_id)

    async def mark_paid(self, parcel_id: int) -> None:
        """Set payment_status to PAID whatever it was before."""
        await self._update_one(parcel_id, {"payment_status": PaymentStatus.PAID})

    async def delete(self, parcel_id: int) -> None:
        """Physically remove a parcel. Payments and tracking events are kept."""
        result = await self.db.execute(delete(Parcel).where(Parcel.id == parcel_id))
        await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("Parcel", parcel_id)
        logger.info("Parcel %s deleted", parcel_id)
