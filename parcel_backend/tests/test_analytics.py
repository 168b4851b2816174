"""
Analytics Service Tests.

Dashboard aggregates recomputed from current parcel and rider state.
"""

import pytest

from parcel_backend.app.models.enums import DeliveryStatus, PaymentStatus, RiderStatus, UserRole
from parcel_backend.app.services.analytics import AnalyticsService


@pytest.mark.asyncio
async def test_user_summary(db_session, make_parcel, make_rider):
    rider = await make_rider()
    await make_parcel(
        created_by="u@test.com", cost=10.0,
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider
    )
    await make_parcel(created_by="u@test.com", cost=5.0)
    await make_parcel(created_by="other@test.com", cost=99.0, payment_status=PaymentStatus.PAID)

    summary = await AnalyticsService(db_session).user_summary("u@test.com")

    assert summary.total_created == 2
    assert summary.total_unpaid == 1
    assert summary.total_delivered == 1
    assert summary.total_cost_paid == 10.0


@pytest.mark.asyncio
async def test_user_summary_without_parcels_is_zeroed(db_session):
    summary = await AnalyticsService(db_session).user_summary("new@test.com")

    assert summary.model_dump() == {
        "total_created": 0,
        "total_unpaid": 0,
        "total_delivered": 0,
        "total_cost_paid": 0.0,
    }


@pytest.mark.asyncio
async def test_admin_summary(db_session, make_parcel, make_rider):
    approved = await make_rider(email="a@test.com", status=RiderStatus.APPROVED)
    await make_rider(email="p@test.com", status=RiderStatus.PENDING)
    await make_rider(email="d@test.com", status=RiderStatus.DEACTIVATED)
    await make_parcel(payment_status=PaymentStatus.PAID)
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=approved)

    summary = await AnalyticsService(db_session).admin_summary()

    assert summary.total_active_riders == 1
    assert summary.total_not_assigned_parcels == 1
    assert summary.total_delivered == 1
    assert summary.total_earn == 0.0


@pytest.mark.asyncio
async def test_rider_status_count_excludes_not_collected(db_session, make_parcel, make_rider):
    rider = await make_rider()
    other = await make_rider(email="other-rider@test.com")
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.ASSIGNED, rider=rider)
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider)
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider)
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.TRANSIT, rider=other)

    counts = await AnalyticsService(db_session).rider_status_count(rider.email)

    assert {c.status: c.count for c in counts} == {
        DeliveryStatus.ASSIGNED: 1,
        DeliveryStatus.DELIVERED: 2,
    }


@pytest.mark.asyncio
async def test_dashboard_endpoints_are_role_scoped(client, auth_headers, make_user, make_parcel):
    await make_user("u@test.com")
    await make_user("admin@test.com", role=UserRole.ADMIN)
    await make_parcel(created_by="u@test.com", cost=7.5, payment_status=PaymentStatus.PAID)

    user_view = await client.get("/v1/dashboard/user/summary", headers=auth_headers("u@test.com"))
    assert user_view.status_code == 200
    assert user_view.json()["total_cost_paid"] == 7.5

    admin_view = await client.get("/v1/dashboard/admin/summary", headers=auth_headers("admin@test.com"))
    assert admin_view.status_code == 200
    assert admin_view.json()["total_not_assigned_parcels"] == 1

    forbidden = await client.get("/v1/dashboard/admin/summary", headers=auth_headers("u@test.com"))
    assert forbidden.status_code == 403

    not_a_rider = await client.get("/v1/dashboard/rider/status-count", headers=auth_headers("admin@test.com"))
    assert not_a_rider.status_code == 403
