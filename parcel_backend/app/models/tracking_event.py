"""
Tracking Event Database Model.

Write-once history of what happened to a parcel and who did it.
"""

from sqlalchemy import Column, Integer, String, DateTime
from parcel_backend.app.db.session import Base


class TrackingEvent(Base):
    """
    Tracking ledger entry.

    Events logged:
    - rider_assigned / transit / delivered (dispatch engine)
    - paid (payment reconciler)
    - status_override (admin correction)
    - free-form events posted by clients
    """
    __tablename__ = "tracking_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Which parcel (plain reference, history survives parcel removal)
    parcel_id = Column(Integer, nullable=False, index=True)
    tracking_id = Column(String(50), nullable=True, index=True)

    # What happened
    status = Column(String(50), nullable=False, index=True)
    message = Column(String(500), nullable=True)

    # Who did it (email of the actor, empty for system events)
    update_by = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<TrackingEvent(id={self.id}, parcel_id={self.parcel_id}, status='{self.status}')>"
