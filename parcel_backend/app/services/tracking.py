"""
Tracking ledger service.

Append-only history of parcel events. Entries are written once and never
updated or deleted.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_backend.app.models.tracking_event import TrackingEvent


class TrackingStatus:
    """Standardized status constants written by the platform itself."""
    PARCEL_CREATED = "parcel_created"
    PAID = "paid"
    RIDER_ASSIGNED = "rider_assigned"
    TRANSIT = "transit"
    DELIVERED = "delivered"
    STATUS_OVERRIDE = "status_override"


class TrackingLedger:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        parcel_id: int,
        status: str,
        update_by: str = "",
        tracking_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> TrackingEvent:
        """
        Append one event to a parcel's history.

        Args:
            parcel_id: Parcel the event belongs to
            status: Event status (use TrackingStatus constants for platform events)
            update_by: Email of the actor, empty for system events
            tracking_id: Public tracking id of the parcel
            message: Free-text note shown to the customer

        Returns:
            Created TrackingEvent instance
        """
        event = TrackingEvent(
            parcel_id=parcel_id,
            tracking_id=tracking_id,
            status=status,
            message=message,
            update_by=update_by or "",
            created_at=datetime.now(timezone.utc),
        )

        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)

        return event

    async def history(self, parcel_id: int, limit: int = 100) -> List[TrackingEvent]:
        """Events for a parcel in the order they were recorded."""
        query = (
            select(TrackingEvent)
            .where(TrackingEvent.parcel_id == parcel_id)
            .order_by(TrackingEvent.created_at.asc(), TrackingEvent.id.asc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
