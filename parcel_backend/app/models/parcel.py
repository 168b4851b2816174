"""
Parcel database model.

Users create parcels, the reconciler flips payment status and the dispatch
engine moves delivery status forward.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from parcel_backend.app.db.session import Base
from parcel_backend.app.models.enums import DeliveryStatus, PaymentStatus, ParcelType


class Parcel(Base):
    """
    Parcel model for the delivery marketplace.

    The assigned rider is a point-in-time copy of the rider's identity fields,
    not a relationship: later edits to the rider never rewrite it. It is set
    exactly when delivery_status is ASSIGNED, TRANSIT or DELIVERED.
    """
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(50), unique=True, nullable=False, index=True)

    # Ownership
    created_by = Column(String(255), nullable=False, index=True)

    # Shipment details
    title = Column(String(200), nullable=False)
    parcel_type = Column(Enum(ParcelType), default=ParcelType.NON_DOCUMENT, nullable=False)
    weight_kg = Column(Float, nullable=True)

    sender_name = Column(String(150), nullable=True)
    sender_contact = Column(String(50), nullable=True)
    sender_region = Column(String(100), nullable=True)
    sender_address = Column(String(500), nullable=True)

    receiver_name = Column(String(150), nullable=True)
    receiver_contact = Column(String(50), nullable=True)
    receiver_region = Column(String(100), nullable=True)
    receiver_address = Column(String(500), nullable=True)

    cost = Column(Float, nullable=False, default=0.0)

    # Status
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False, index=True)
    delivery_status = Column(
        Enum(DeliveryStatus), default=DeliveryStatus.NOT_COLLECTED, nullable=False, index=True
    )

    # Assigned rider snapshot
    assigned_rider_id = Column(Integer, nullable=True)
    assigned_rider_name = Column(String(150), nullable=True)
    assigned_rider_email = Column(String(255), nullable=True, index=True)
    assigned_rider_contact = Column(String(50), nullable=True)
    assigned_rider_region = Column(String(100), nullable=True)

    # Timestamps
    creation_date = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    @property
    def assigned_rider(self):
        """The rider snapshot as a dict, or None when no rider is assigned."""
        if self.assigned_rider_id is None:
            return None
        return {
            "rider_id": self.assigned_rider_id,
            "name": self.assigned_rider_name,
            "email": self.assigned_rider_email,
            "contact": self.assigned_rider_contact,
            "region": self.assigned_rider_region,
        }

    def __repr__(self):
        return (
            f"<Parcel(id={self.id}, tracking_id='{self.tracking_id}', "
            f"payment='{self.payment_status.value}', delivery='{self.delivery_status.value}')>"
        )
