"""
User account service.

Upsert-by-email on sign-in, role lookup and admin role management.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_backend.app.core.exceptions import InvalidInputError, ResourceNotFoundError
from parcel_backend.app.models.enums import UserRole
from parcel_backend.app.models.user import User

logger = logging.getLogger("parcel_backend.accounts")

# Roles an admin may grant directly; RIDER only comes from rider approval
GRANTABLE_ROLES = (UserRole.USER, UserRole.ADMIN)


class AccountService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .where(User.email == email)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
        last_log_in: Optional[datetime] = None,
    ) -> Tuple[User, bool]:
        """
        Insert a new USER account, or refresh last_log_in on an existing one.

        Returns:
            (user, inserted)
        """
        last_log_in = last_log_in or datetime.now(timezone.utc)
        existing = await self.get_by_email(email)
        if existing:
            await self.db.execute(
                update(User).where(User.id == existing.id).values(last_log_in=last_log_in)
            )
            await self.db.commit()
            return await self.get_by_email(email), False

        user = User(
            email=email,
            name=name,
            photo_url=photo_url,
            role=UserRole.USER,
            created_at=datetime.now(timezone.utc),
            last_log_in=last_log_in,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("User %s created", email)
        return user, True

    async def get_role(self, email: str) -> UserRole:
        user = await self.get_by_email(email)
        if not user:
            raise ResourceNotFoundError("User", email)
        return user.role

    async def search(self, email: Optional[str] = None, limit: int = 10) -> List[User]:
        """Case-insensitive partial email match, newest accounts first."""
        query = select(User)
        if email:
            query = query.where(User.email.ilike(f"%{email}%"))
        query = query.order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def set_role(self, user_id: int, role: str, actor: str = "") -> UserRole:
        """
        Grant USER or ADMIN.

        Raises:
            InvalidInputError: role is not grantable
            ResourceNotFoundError: no such user, or the role was already set
        """
        try:
            new_role = UserRole(role)
        except ValueError:
            new_role = None
        if new_role not in GRANTABLE_ROLES:
            raise InvalidInputError("Invalid role. Must be 'user' or 'admin'.", details={"role": role})

        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.role != new_role)
            .values(role=new_role)
        )
        await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("User", user_id, message="User not found or role unchanged")

        logger.info("User %s role set to %s by %s", user_id, new_role.value, actor)
        return new_role
