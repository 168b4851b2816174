"""
Rider Registry.

Owns the rider approval lifecycle:

    pending -> approved | rejected
    approved -> deactivated

Approving a rider also promotes the matching user account to the RIDER role.
That promotion is a second, separate write and is best-effort: if it fails the
rider stays approved and the failure is only logged. Re-running the approval
side effect (``elevate_rider_role``) reconciles such a gap.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_backend.app.core.exceptions import (
    InvalidInputError,
    InvalidTransitionError,
    ResourceNotFoundError,
)
from parcel_backend.app.models.enums import RiderDecision, RiderStatus, UserRole
from parcel_backend.app.models.rider import Rider
from parcel_backend.app.models.user import User

logger = logging.getLogger("parcel_backend.riders")


class RiderRegistry:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def apply(self, email: str, profile: Dict[str, Any]) -> Rider:
        """
        File a new rider application in PENDING state.

        Raises:
            InvalidInputError: the email already has a pending or approved application
        """
        existing = await self.db.execute(
            select(Rider.id).where(
                Rider.email == email,
                Rider.status.in_([RiderStatus.PENDING, RiderStatus.APPROVED]),
            )
        )
        if existing.first() is not None:
            raise InvalidInputError(
                "Rider application already exists for this email",
                details={"email": email}
            )

        rider = Rider(email=email, status=RiderStatus.PENDING, **profile)
        self.db.add(rider)
        await self.db.commit()
        await self.db.refresh(rider)

        logger.info("Rider application %s filed by %s", rider.id, email)
        return rider

    async def get(self, rider_id: int) -> Rider:
        result = await self.db.execute(
            select(Rider)
            .where(Rider.id == rider_id)
            .execution_options(populate_existing=True)
        )
        rider = result.scalar_one_or_none()
        if not rider:
            raise ResourceNotFoundError("Rider", rider_id)
        return rider

    async def list_by_status(self, status: Optional[RiderStatus] = None, name: Optional[str] = None) -> List[Rider]:
        """Riders filtered by status and case-insensitive partial name, newest first."""
        query = select(Rider)
        if status:
            query = query.where(Rider.status == status)
        if name:
            query = query.where(Rider.name.ilike(f"%{name}%"))

        result = await self.db.execute(query.order_by(Rider.created_at.desc(), Rider.id.desc()))
        return list(result.scalars().all())

    async def list_pending(self) -> List[Rider]:
        return await self.list_by_status(status=RiderStatus.PENDING)

    async def _transition(self, rider: Rider, expected: RiderStatus, target: RiderStatus) -> Rider:
        """Single-row match-then-set from `expected` to `target`."""
        if rider.status != expected:
            raise InvalidTransitionError(
                f"Rider is {rider.status.value}, expected {expected.value}",
                current=rider.status.value,
                target=target.value,
            )

        result = await self.db.execute(
            update(Rider)
            .where(Rider.id == rider.id, Rider.status == expected)
            .values(status=target, updated_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        if result.rowcount == 0:
            # Another request moved the rider between our read and write
            current = await self.get(rider.id)
            raise InvalidTransitionError(
                f"Rider is {current.status.value}, expected {expected.value}",
                current=current.status.value,
                target=target.value,
            )
        return await self.get(rider.id)

    async def decide(self, rider_id: int, decision: RiderDecision) -> Rider:
        """
        Approve or reject a pending application.

        The rider status is committed first. On approval the user's role is
        then elevated in a separate write that never fails the call.
        """
        rider = await self.get(rider_id)
        target = RiderStatus.APPROVED if decision == RiderDecision.APPROVED else RiderStatus.REJECTED
        rider = await self._transition(rider, RiderStatus.PENDING, target)
        logger.info("Rider %s %s", rider.id, target.value)

        if target == RiderStatus.APPROVED:
            await self.elevate_rider_role(rider.email)
            # A failed elevation rolls back and expires the session
            rider = await self.get(rider_id)
        return rider

    async def elevate_rider_role(self, email: str) -> bool:
        """
        Set User(email).role to RIDER.

        Best-effort: storage errors are logged and swallowed. Returns whether a
        user row was updated.
        """
        try:
            result = await self.db.execute(
                update(User).where(User.email == email).values(role=UserRole.RIDER)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning("Rider approved but role elevation failed for %s: %s", email, e)
            return False

        if result.rowcount == 0:
            logger.warning("Rider approved but no user account exists for %s", email)
            return False
        return True

    async def deactivate(self, rider_id: int) -> Rider:
        """Approved -> deactivated. The user's role is left as it is."""
        rider = await self.get(rider_id)
        rider = await self._transition(rider, RiderStatus.APPROVED, RiderStatus.DEACTIVATED)
        logger.info("Rider %s deactivated", rider.id)
        return rider
