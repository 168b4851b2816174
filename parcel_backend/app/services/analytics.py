"""
Analytics Service.

Role-scoped dashboard aggregates, recomputed from current state on every
request. READ-ONLY.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case
from typing import List

from parcel_backend.app.models.parcel import Parcel
from parcel_backend.app.models.rider import Rider
from parcel_backend.app.models.enums import DeliveryStatus, PaymentStatus, RiderStatus
from parcel_backend.app.schemas.analytics import RiderStatusCount, UserSummary, AdminSummary


class AnalyticsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def rider_status_count(self, email: str) -> List[RiderStatusCount]:
        """Rider's parcels grouped by delivery status, not_collected excluded."""
        stmt = select(
            Parcel.delivery_status,
            func.count(Parcel.id).label("count")
        ).where(
            Parcel.assigned_rider_email == email,
            Parcel.delivery_status != DeliveryStatus.NOT_COLLECTED
        ).group_by(Parcel.delivery_status)

        results = await self.db.execute(stmt)
        return [
            RiderStatusCount(status=row.delivery_status, count=row.count)
            for row in results
        ]

    async def user_summary(self, email: str) -> UserSummary:
        """Counts and paid total over the parcels a user created."""
        stmt = select(
            func.count(Parcel.id).label("total_created"),
            func.sum(case((Parcel.payment_status == PaymentStatus.UNPAID, 1), else_=0)).label("total_unpaid"),
            func.sum(case((Parcel.delivery_status == DeliveryStatus.DELIVERED, 1), else_=0)).label("total_delivered"),
            func.sum(case((Parcel.payment_status == PaymentStatus.PAID, Parcel.cost), else_=0)).label("total_cost_paid"),
        ).where(Parcel.created_by == email)

        row = (await self.db.execute(stmt)).one()
        if not row.total_created:
            return UserSummary()

        return UserSummary(
            total_created=row.total_created,
            total_unpaid=row.total_unpaid or 0,
            total_delivered=row.total_delivered or 0,
            total_cost_paid=float(row.total_cost_paid or 0.0)
        )

    async def admin_summary(self) -> AdminSummary:
        """Fleet-wide counters. Earnings are a placeholder until settlement exists."""
        active_riders = (await self.db.execute(
            select(func.count(Rider.id)).where(Rider.status == RiderStatus.APPROVED)
        )).scalar() or 0

        # Paid but still waiting for a rider
        not_assigned = (await self.db.execute(
            select(func.count(Parcel.id)).where(
                Parcel.payment_status == PaymentStatus.PAID,
                Parcel.delivery_status == DeliveryStatus.NOT_COLLECTED
            )
        )).scalar() or 0

        delivered = (await self.db.execute(
            select(func.count(Parcel.id)).where(Parcel.delivery_status == DeliveryStatus.DELIVERED)
        )).scalar() or 0

        return AdminSummary(
            total_active_riders=active_riders,
            total_not_assigned_parcels=not_assigned,
            total_delivered=delivered,
            total_earn=0.0
        )
