"""
Dispatch Engine Tests.

Rider assignment preconditions, forward-only movement, admin overrides and
the rider's delivery lists.
"""

import pytest

from parcel_backend.app.core.exceptions import (
    InsufficientPermissionsError,
    InvalidTransitionError,
    NoContentError,
    ResourceNotFoundError,
    RiderNotAssignableError,
)
from parcel_backend.app.models.enums import (
    DeliveryStatus, PaymentStatus, RiderStatus, RIDER_BEARING_STATUSES, UserRole
)
from parcel_backend.app.services.dispatch import DispatchEngine
from parcel_backend.app.services.parcel_store import ParcelStore
from parcel_backend.app.services.rider_registry import RiderRegistry
from parcel_backend.app.services.tracking import TrackingLedger, TrackingStatus


@pytest.fixture
def dispatch(db_session):
    return DispatchEngine(
        ParcelStore(db_session), RiderRegistry(db_session), TrackingLedger(db_session)
    )


def assert_snapshot_consistent(parcel):
    bearing = parcel.delivery_status in RIDER_BEARING_STATUSES
    assert (parcel.assigned_rider is not None) == bearing


@pytest.mark.asyncio
async def test_assign_rider_to_paid_parcel(dispatch, make_rider, make_parcel, db_session):
    rider = await make_rider()
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    result = await dispatch.assign_rider(parcel.id, rider.id, actor="admin@test.com")

    assert result["success"] is True
    assert result["delivery_status"] == DeliveryStatus.ASSIGNED
    assert result["assigned_rider"]["email"] == rider.email

    stored = await ParcelStore(db_session).get(parcel.id)
    assert stored.delivery_status == DeliveryStatus.ASSIGNED
    assert stored.assigned_rider["rider_id"] == rider.id
    assert_snapshot_consistent(stored)

    history = await TrackingLedger(db_session).history(parcel.id)
    assert [e.status for e in history] == [TrackingStatus.RIDER_ASSIGNED]
    assert history[0].update_by == "admin@test.com"


@pytest.mark.asyncio
async def test_assign_missing_parcel_mutates_nothing(dispatch, make_rider, db_session):
    rider = await make_rider()

    with pytest.raises(ResourceNotFoundError):
        await dispatch.assign_rider(999, rider.id)

    assert await ParcelStore(db_session).list_by_filter() == []
    assert await TrackingLedger(db_session).history(999) == []


@pytest.mark.asyncio
async def test_assign_missing_rider_not_found(dispatch, make_parcel, db_session):
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    with pytest.raises(ResourceNotFoundError):
        await dispatch.assign_rider(parcel.id, 999)

    stored = await ParcelStore(db_session).get(parcel.id)
    assert stored.delivery_status == DeliveryStatus.NOT_COLLECTED
    assert stored.assigned_rider is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [RiderStatus.PENDING, RiderStatus.REJECTED, RiderStatus.DEACTIVATED])
async def test_assign_rejects_unapproved_rider(dispatch, make_rider, make_parcel, db_session, status):
    rider = await make_rider(status=status)
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    with pytest.raises(RiderNotAssignableError):
        await dispatch.assign_rider(parcel.id, rider.id)

    stored = await ParcelStore(db_session).get(parcel.id)
    assert stored.assigned_rider is None


@pytest.mark.asyncio
async def test_assign_rejects_unpaid_parcel(dispatch, make_rider, make_parcel):
    rider = await make_rider()
    parcel = await make_parcel(payment_status=PaymentStatus.UNPAID)

    with pytest.raises(InvalidTransitionError):
        await dispatch.assign_rider(parcel.id, rider.id)


@pytest.mark.asyncio
async def test_reassign_before_pickup_replaces_snapshot(dispatch, make_rider, make_parcel, db_session):
    first = await make_rider(email="first@test.com", name="First")
    second = await make_rider(email="second@test.com", name="Second")
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    await dispatch.assign_rider(parcel.id, first.id)
    await dispatch.assign_rider(parcel.id, second.id)

    stored = await ParcelStore(db_session).get(parcel.id)
    assert stored.assigned_rider["email"] == "second@test.com"


@pytest.mark.asyncio
async def test_assign_after_pickup_rejected(dispatch, make_rider, make_parcel):
    rider = await make_rider()
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.TRANSIT, rider=rider
    )

    with pytest.raises(InvalidTransitionError):
        await dispatch.assign_rider(parcel.id, rider.id)


@pytest.mark.asyncio
async def test_snapshot_not_rewritten_by_rider_changes(dispatch, make_rider, make_parcel, db_session):
    rider = await make_rider(name="Original Name")
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)
    await dispatch.assign_rider(parcel.id, rider.id)

    rider.name = "Renamed Later"
    await db_session.commit()

    stored = await ParcelStore(db_session).get(parcel.id)
    assert stored.assigned_rider["name"] == "Original Name"


@pytest.mark.asyncio
async def test_forward_moves_recorded(dispatch, make_rider, make_parcel, db_session):
    rider = await make_rider()
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.ASSIGNED, rider=rider
    )

    moved = await dispatch.update_delivery_status(parcel.id, "transit", actor=rider.email, actor_role=UserRole.RIDER)
    assert moved.delivery_status == DeliveryStatus.TRANSIT

    moved = await dispatch.update_delivery_status(parcel.id, DeliveryStatus.DELIVERED, actor=rider.email, actor_role=UserRole.RIDER)
    assert moved.delivery_status == DeliveryStatus.DELIVERED
    assert_snapshot_consistent(moved)

    history = await TrackingLedger(db_session).history(parcel.id)
    assert [e.status for e in history] == [TrackingStatus.TRANSIT, TrackingStatus.DELIVERED]


@pytest.mark.asyncio
async def test_backward_move_rejected(dispatch, make_rider, make_parcel):
    rider = await make_rider()
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider
    )

    with pytest.raises(InvalidTransitionError):
        await dispatch.update_delivery_status(parcel.id, DeliveryStatus.TRANSIT, actor="admin@test.com", actor_role=UserRole.ADMIN)


@pytest.mark.asyncio
async def test_uncollected_parcel_cannot_skip_assignment(dispatch, make_parcel):
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    with pytest.raises(InvalidTransitionError):
        await dispatch.update_delivery_status(parcel.id, DeliveryStatus.TRANSIT, actor="admin@test.com", actor_role=UserRole.ADMIN)

    with pytest.raises(InvalidTransitionError):
        await dispatch.update_delivery_status(parcel.id, DeliveryStatus.ASSIGNED, actor="admin@test.com", actor_role=UserRole.ADMIN)


@pytest.mark.asyncio
async def test_unknown_status_rejected(dispatch, make_parcel):
    parcel = await make_parcel()

    with pytest.raises(InvalidTransitionError):
        await dispatch.update_delivery_status(parcel.id, "lost")


@pytest.mark.asyncio
async def test_rider_cannot_move_someone_elses_parcel(dispatch, make_rider, make_parcel):
    owner = await make_rider(email="owner@test.com")
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.ASSIGNED, rider=owner
    )

    with pytest.raises(InsufficientPermissionsError):
        await dispatch.update_delivery_status(
            parcel.id, DeliveryStatus.TRANSIT, actor="intruder@test.com", actor_role=UserRole.RIDER
        )


@pytest.mark.asyncio
async def test_override_back_to_not_collected_clears_rider(dispatch, make_rider, make_parcel, db_session):
    rider = await make_rider()
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.TRANSIT, rider=rider
    )

    corrected = await dispatch.override_delivery_status(parcel.id, DeliveryStatus.NOT_COLLECTED, actor="admin@test.com")

    assert corrected.delivery_status == DeliveryStatus.NOT_COLLECTED
    assert corrected.assigned_rider is None
    history = await TrackingLedger(db_session).history(parcel.id)
    assert history[-1].status == TrackingStatus.STATUS_OVERRIDE
    assert history[-1].message == "transit -> not_collected"


@pytest.mark.asyncio
async def test_override_backwards_keeps_rider(dispatch, make_rider, make_parcel):
    rider = await make_rider()
    parcel = await make_parcel(
        payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider
    )

    corrected = await dispatch.override_delivery_status(parcel.id, DeliveryStatus.TRANSIT, actor="admin@test.com")

    assert corrected.delivery_status == DeliveryStatus.TRANSIT
    assert corrected.assigned_rider["rider_id"] == rider.id


@pytest.mark.asyncio
async def test_override_requires_rider_for_bearing_status(dispatch, make_parcel):
    parcel = await make_parcel(payment_status=PaymentStatus.PAID)

    with pytest.raises(InvalidTransitionError):
        await dispatch.override_delivery_status(parcel.id, DeliveryStatus.DELIVERED, actor="admin@test.com")


@pytest.mark.asyncio
async def test_pending_for_rider_lists_open_work(dispatch, make_rider, make_parcel):
    rider = await make_rider()
    assigned = await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.ASSIGNED, rider=rider)
    transit = await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.TRANSIT, rider=rider)
    await make_parcel(payment_status=PaymentStatus.PAID, delivery_status=DeliveryStatus.DELIVERED, rider=rider)

    pending = await dispatch.pending_for_rider(rider.email)
    delivered = await dispatch.delivered_for_rider(rider.email)

    assert {p.id for p in pending} == {assigned.id, transit.id}
    assert len(delivered) == 1


@pytest.mark.asyncio
async def test_pending_for_rider_empty_is_no_content(dispatch, make_rider):
    rider = await make_rider()

    with pytest.raises(NoContentError):
        await dispatch.pending_for_rider(rider.email)

    assert await dispatch.delivered_for_rider(rider.email) == []
