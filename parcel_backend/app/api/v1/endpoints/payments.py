"""
Payment API Endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from parcel_backend.app.core.dependencies import (
    get_current_principal, get_parcel_store, get_payment_reconciler
)
from parcel_backend.app.core.guards import require_role, ParcelAccessGuard, ALL_ROLES
from parcel_backend.app.schemas.payment import (
    PaymentCreate, PaymentResponse, PaymentRecordedResponse,
    PaymentIntentRequest, PaymentIntentResponse
)
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.payments import PaymentReconciler

router = APIRouter(tags=["Payments"])
payment_guard = ParcelAccessGuard()


@router.post("/payments", response_model=PaymentRecordedResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment_data: PaymentCreate,
    current_user: dict = Depends(require_role(ALL_ROLES)),
    parcels: ParcelStore = Depends(get_parcel_store),
    reconciler: PaymentReconciler = Depends(get_payment_reconciler)
):
    """
    Record a charge confirmed with the gateway and mark the parcel paid.

    Callers who may not view the parcel may not pay for it. Every call
    appends a record, even for an already paid parcel.
    """
    parcel = await parcels.get(payment_data.parcel_id)
    payment_guard.enforce(parcel, current_user)

    payment = await reconciler.record_payment(
        parcel_id=payment_data.parcel_id,
        amount=payment_data.amount,
        transaction_id=payment_data.transaction_id,
        method=payment_data.payment_method,
        payer=current_user["email"],
    )
    return PaymentRecordedResponse(
        message="Payment recorded",
        payment=PaymentResponse.model_validate(payment)
    )


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    email: Optional[str] = Query(None, description="Payer email"),
    current_user: dict = Depends(require_role(ALL_ROLES)),
    reconciler: PaymentReconciler = Depends(get_payment_reconciler)
):
    """Payment history, newest first. Non-admins only see their own."""
    payer = payment_guard.scope_email(current_user, email)
    payments = await reconciler.list_payments(payer)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    intent_data: PaymentIntentRequest,
    principal: dict = Depends(get_current_principal),
    reconciler: PaymentReconciler = Depends(get_payment_reconciler)
):
    """Open a card payment intent with the gateway and return its client secret."""
    client_secret = await reconciler.create_payment_intent(intent_data.amount_in_cents)
    return PaymentIntentResponse(client_secret=client_secret)
