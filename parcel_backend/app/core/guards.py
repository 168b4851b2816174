"""
Security guards for role-based and ownership-based access control.

One capability check, parameterized by the roles allowed, replaces per-role
middleware.
"""

from typing import List
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from parcel_backend.app.core.dependencies import get_current_principal
from parcel_backend.app.core.exceptions import InsufficientPermissionsError
from parcel_backend.app.db.session import get_db
from parcel_backend.app.models.enums import UserRole
from parcel_backend.app.models.parcel import Parcel
from parcel_backend.app.models.user import User

ALL_ROLES = [UserRole.USER, UserRole.RIDER, UserRole.ADMIN]


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/riders")
        async def list_riders(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    The role is read from the users table on every request, so a role change
    takes effect on the caller's next request.

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency returning the principal with `role` and `user_id` added

    Raises:
        InsufficientPermissionsError (403) if the principal has no account or
        its role is not in allowed_roles
    """
    async def role_checker(
        principal: dict = Depends(get_current_principal),
        db: AsyncSession = Depends(get_db)
    ) -> dict:
        result = await db.execute(
            select(User.id, User.role).where(User.email == principal["email"])
        )
        row = result.first()

        if row is None:
            raise InsufficientPermissionsError("Forbidden access")

        if row.role not in allowed_roles:
            raise InsufficientPermissionsError(
                f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return {**principal, "role": row.role, "user_id": row.id}

    return role_checker


def can_view_parcel(parcel: Parcel, current_user: dict) -> bool:
    """
    Admins see every parcel, users see parcels they created, riders see
    parcels assigned to them.
    """
    if current_user.get("role") == UserRole.ADMIN:
        return True

    email = current_user.get("email")
    return parcel.created_by == email or parcel.assigned_rider_email == email


class ParcelAccessGuard:
    """
    Class-based ownership guard for parcel reads.

    Usage:
        parcel_guard = ParcelAccessGuard()

        parcel = await parcels.get(parcel_id)
        parcel_guard.enforce(parcel, current_user)
    """

    def enforce(self, parcel: Parcel, current_user: dict):
        """Raise 403 unless the principal may view this parcel."""
        if not can_view_parcel(parcel, current_user):
            raise InsufficientPermissionsError(
                "Access denied. You do not have permission to access this parcel."
            )

    def scope_email(self, current_user: dict, requested: str = None) -> str:
        """
        The `created_by`/payer email a listing may be filtered by.

        Admins may ask for anyone (or nobody, meaning all). Everyone else is
        pinned to their own email and asking for another is a 403.
        """
        if current_user.get("role") == UserRole.ADMIN:
            return requested

        own = current_user.get("email")
        if requested and requested != own:
            raise InsufficientPermissionsError("You may only list your own records")
        return own
