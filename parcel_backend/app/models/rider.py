"""
Rider database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from parcel_backend.app.db.session import Base
from parcel_backend.app.models.enums import RiderStatus


class Rider(Base):
    """
    Rider application and approval record.

    Only APPROVED riders may be assigned to parcels.
    """
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identity of the applicant (links to users.email, not enforced)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(150), nullable=False, index=True)

    # Profile
    age = Column(Integer, nullable=True)
    region = Column(String(100), nullable=False)
    district = Column(String(100), nullable=True)
    contact = Column(String(50), nullable=False)
    nid = Column(String(50), nullable=True)
    bike_brand = Column(String(100), nullable=True)
    bike_registration = Column(String(100), nullable=True)

    status = Column(Enum(RiderStatus), default=RiderStatus.PENDING, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}', status='{self.status.value}')>"
