"""
User database model.

Accounts are keyed by email, the identity carried in verified tokens.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from parcel_backend.app.db.session import Base
from parcel_backend.app.models.enums import UserRole


class User(Base):
    """
    User account.

    The role defaults to USER, becomes RIDER once when a rider application is
    approved, and becomes ADMIN only through another admin.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=True)
    photo_url = Column(String(500), nullable=True)

    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_log_in = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
