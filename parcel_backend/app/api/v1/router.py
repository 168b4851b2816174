"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from parcel_backend.app.api.v1.endpoints import (
    auth, users, parcels, riders, payments, tracking, dashboard
)

router = APIRouter()

router.include_router(auth.router)
router.include_router(users.router)

# Parcel store and dispatch
router.include_router(parcels.router)
router.include_router(parcels.admin_router)

# Rider registry and rider work lists
router.include_router(riders.router)
router.include_router(riders.deliveries_router)

router.include_router(payments.router)
router.include_router(tracking.router)
router.include_router(dashboard.router)
