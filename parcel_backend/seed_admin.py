"""
Bootstrap the first admin account.

Admins can only be granted by another admin, so the very first one is seeded
here. Run after the database is reachable:

    python parcel_backend/seed_admin.py admin@example.com
"""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from parcel_backend.app.db.session import AsyncSessionLocal, engine, Base
from parcel_backend.app.models.enums import UserRole
from parcel_backend.app.models.user import User
import parcel_backend.app.main  # noqa: F401  registers every model with Base


async def seed_admin(email: str) -> None:
    """Create `email` as an admin, or promote the existing account."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user and user.role == UserRole.ADMIN:
            print(f"{email} is already an admin, nothing to do")
            return

        if user:
            user.role = UserRole.ADMIN
            print(f"Promoted {email} to admin")
        else:
            db.add(User(
                email=email,
                role=UserRole.ADMIN,
                created_at=datetime.now(timezone.utc),
            ))
            print(f"Created admin {email}")

        await db.commit()

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: seed_admin.py <email>")
        sys.exit(1)
    asyncio.run(seed_admin(sys.argv[1]))
