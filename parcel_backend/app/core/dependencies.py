"""
FastAPI dependencies.

Bearer-token authentication and per-request construction of the services,
each receiving the request's database session explicitly.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from parcel_backend.app.core.exceptions import AuthenticationError, TokenRevokedError
from parcel_backend.app.core.jwt import decode_access_token
from parcel_backend.app.core.token_revocation import is_token_revoked
from parcel_backend.app.db.session import get_db
from parcel_backend.app.services.accounts import AccountService
from parcel_backend.app.services.analytics import AnalyticsService
from parcel_backend.app.services.dispatch import DispatchEngine
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.payment_gateway import PaymentGateway, get_payment_gateway
from parcel_backend.app.services.payments import PaymentReconciler
from parcel_backend.app.services.rider_registry import RiderRegistry
from parcel_backend.app.services.tracking import TrackingLedger

# HTTP Bearer security scheme; missing credentials are reported as 401 by us
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    FastAPI dependency for bearer-token authentication.

    Checks:
    1. A bearer token is present
    2. Signature and expiry are valid
    3. The token carries an email identity
    4. The token has not been revoked

    Returns:
        Decoded token payload (sub, email, exp, ...) plus the raw token

    Raises:
        AuthenticationError / TokenRevokedError: 401, caller must not retry
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized access")

    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    if not payload.get("email"):
        raise AuthenticationError("Invalid token payload")

    if await is_token_revoked(token):
        raise TokenRevokedError()

    return {**payload, "token": token}


def get_parcel_store(db: AsyncSession = Depends(get_db)) -> ParcelStore:
    return ParcelStore(db)


def get_rider_registry(db: AsyncSession = Depends(get_db)) -> RiderRegistry:
    return RiderRegistry(db)


def get_tracking_ledger(db: AsyncSession = Depends(get_db)) -> TrackingLedger:
    return TrackingLedger(db)


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_dispatch_engine(
    parcels: ParcelStore = Depends(get_parcel_store),
    riders: RiderRegistry = Depends(get_rider_registry),
    ledger: TrackingLedger = Depends(get_tracking_ledger),
) -> DispatchEngine:
    return DispatchEngine(parcels, riders, ledger)


def get_payment_reconciler(
    db: AsyncSession = Depends(get_db),
    parcels: ParcelStore = Depends(get_parcel_store),
    ledger: TrackingLedger = Depends(get_tracking_ledger),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentReconciler:
    return PaymentReconciler(db, parcels, ledger, gateway)
