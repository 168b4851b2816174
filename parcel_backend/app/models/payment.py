"""
Payment record database model.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from parcel_backend.app.db.session import Base
from parcel_backend.app.models.enums import PaymentRecordStatus


class Payment(Base):
    """
    Append-only record of a successful payment.

    A parcel may accumulate several records; parcel_id is a plain reference so
    the history outlives the parcel.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parcel_id = Column(Integer, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String(255), nullable=False, index=True)
    payment_method = Column(String(50), nullable=True)
    status = Column(Enum(PaymentRecordStatus), default=PaymentRecordStatus.SUCCESS, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<Payment(id={self.id}, parcel_id={self.parcel_id}, amount={self.amount}, txn='{self.transaction_id}')>"
