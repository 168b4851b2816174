"""
Payment Reconciler.

Records successful payments and flips the parcel's payment flag. The two
writes are committed separately: a failure between them leaves the parcel
paid without a payment record. Repeated calls each append a record; no
duplicate detection is done.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_backend.app.models.enums import PaymentRecordStatus
from parcel_backend.app.models.payment import Payment
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.payment_gateway import PaymentGateway
from parcel_backend.app.services.tracking import TrackingLedger, TrackingStatus

logger = logging.getLogger("parcel_backend.payments")


class PaymentReconciler:

    def __init__(
        self,
        db: AsyncSession,
        parcels: ParcelStore,
        ledger: TrackingLedger,
        gateway: PaymentGateway,
    ):
        self.db = db
        self.parcels = parcels
        self.ledger = ledger
        self.gateway = gateway

    async def record_payment(
        self,
        parcel_id: int,
        amount: float,
        transaction_id: str,
        method: Optional[str],
        payer: str,
    ) -> Payment:
        """
        Mark the parcel paid, then append a success record.

        Raises:
            ResourceNotFoundError: the parcel does not exist (nothing is written)
        """
        # 1. Flag first, committed on its own
        await self.parcels.mark_paid(parcel_id)

        # 2. Payment record, second independent write
        payment = Payment(
            parcel_id=parcel_id,
            email=payer,
            amount=amount,
            transaction_id=transaction_id,
            payment_method=method,
            status=PaymentRecordStatus.SUCCESS,
            paid_at=datetime.now(timezone.utc),
        )
        self.db.add(payment)
        await self.db.commit()
        await self.db.refresh(payment)

        parcel = await self.parcels.get(parcel_id)
        await self.ledger.record(
            parcel_id=parcel_id,
            tracking_id=parcel.tracking_id,
            status=TrackingStatus.PAID,
            message=f"Paid {amount} ({transaction_id})",
            update_by=payer,
        )
        logger.info("Payment %s recorded for parcel %s by %s", transaction_id, parcel_id, payer)
        return payment

    async def list_payments(self, email: Optional[str] = None) -> List[Payment]:
        """Payment records for a payer (all records when email is None), newest first."""
        query = select(Payment)
        if email:
            query = query.where(Payment.email == email)
        result = await self.db.execute(query.order_by(Payment.paid_at.desc(), Payment.id.desc()))
        return list(result.scalars().all())

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """Delegate to the gateway; no local state changes."""
        return await self.gateway.create_payment_intent(amount_in_cents)
