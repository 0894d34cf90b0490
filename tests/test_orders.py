# tests/test_orders.py
from datetime import datetime, timedelta, timezone

import pytest

from storefront.errors import InvalidStatusTransition, OrderError, OrderNotFound
from storefront.models.checkout import (
    ORDER_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    can_transition,
)


def make_order(order_id="AGRI18102026521030ABCD", seller_id="seller-001", created_at=None, **overrides):
    now = created_at or datetime.now(timezone.utc)
    data = dict(
        order_id=order_id,
        customer_name="Ramesh Patel",
        customer_phone="9876543210",
        customer_address="12 Station Road",
        customer_pincode="380052",
        seller_id=seller_id,
        seller_name="Patel Agro Centre",
        seller_shop_name="Patel Agro Centre",
        items=[OrderItem(product_id="p1", product_name="Urea", price=266.5, quantity=2, unit="bag")],
        total_amount=533.0,
        created_at=now,
        updated_at=now,
    )
    data.update(overrides)
    return Order(**data)


async def walk(orders_db, doc_id, *statuses, reason=None):
    order = None
    for status in statuses:
        order = await orders_db.update_status(doc_id, status, reason)
    return order


# --- Status machine ---

@pytest.mark.parametrize(
    "current, requested, allowed",
    [
        (OrderStatus.PENDING, OrderStatus.RECEIVED, True),
        (OrderStatus.PENDING, OrderStatus.FAILED, True),
        (OrderStatus.RECEIVED, OrderStatus.PACKED, True),
        (OrderStatus.PACKED, OrderStatus.OUT_FOR_DELIVERY, True),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, True),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.NOT_DELIVERED, True),
        (OrderStatus.NOT_DELIVERED, OrderStatus.OUT_FOR_DELIVERY, True),
        (OrderStatus.DELIVERED, OrderStatus.PACKED, False),
        (OrderStatus.RECEIVED, OrderStatus.DELIVERED, False),
        (OrderStatus.FAILED, OrderStatus.RECEIVED, False),
        (OrderStatus.RECEIVED, OrderStatus.FAILED, False),
    ],
)
def test_can_transition(current, requested, allowed):
    assert can_transition(current, requested) is allowed


def test_every_status_has_transitions_defined():
    assert set(ORDER_TRANSITIONS) == set(OrderStatus)
    assert {s for s in OrderStatus if s.is_terminal} == {OrderStatus.DELIVERED, OrderStatus.FAILED}


# --- Order database ---

@pytest.mark.asyncio
async def test_create_and_fetch(orders_db):
    created = await orders_db.create_order(make_order())

    assert created.id
    fetched = await orders_db.get_order(created.id)
    assert fetched.order_id == created.order_id
    assert fetched.status == OrderStatus.PENDING
    assert (await orders_db.find_by_order_id(created.order_id)).id == created.id
    assert await orders_db.find_by_order_id("AGRI00000000000000XXXX") is None


@pytest.mark.asyncio
async def test_full_lifecycle_stamps_timestamps(orders_db):
    order = await orders_db.create_order(make_order())

    delivered = await walk(
        orders_db,
        order.id,
        OrderStatus.RECEIVED,
        OrderStatus.PACKED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    )

    assert delivered.status == OrderStatus.DELIVERED
    stored = await orders_db.get_order(order.id)
    assert stored.packed_at and stored.out_for_delivery_at and stored.delivered_at


@pytest.mark.asyncio
async def test_illegal_transition_is_rejected(orders_db):
    order = await orders_db.create_order(make_order())
    await orders_db.update_status(order.id, OrderStatus.RECEIVED)

    with pytest.raises(InvalidStatusTransition):
        await orders_db.update_status(order.id, OrderStatus.DELIVERED)

    assert (await orders_db.get_order(order.id)).status == OrderStatus.RECEIVED


@pytest.mark.asyncio
async def test_unknown_order(orders_db):
    with pytest.raises(OrderNotFound):
        await orders_db.update_status("ghost", OrderStatus.RECEIVED)


@pytest.mark.asyncio
async def test_not_delivered_requires_reason_and_can_retry(orders_db):
    order = await orders_db.create_order(make_order())
    await walk(orders_db, order.id, OrderStatus.RECEIVED, OrderStatus.PACKED, OrderStatus.OUT_FOR_DELIVERY)

    with pytest.raises(OrderError):
        await orders_db.update_status(order.id, OrderStatus.NOT_DELIVERED, "  ")

    missed = await orders_db.update_status(order.id, OrderStatus.NOT_DELIVERED, "Customer not home")
    assert missed.not_delivered_reason == "Customer not home"

    retried = await orders_db.update_status(order.id, OrderStatus.OUT_FOR_DELIVERY)
    assert retried.retry_attempts == 1


@pytest.mark.asyncio
async def test_list_orders_filters_newest_first(orders_db):
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    old = await orders_db.create_order(make_order(created_at=base))
    new = await orders_db.create_order(make_order(created_at=base + timedelta(hours=1)))
    await orders_db.create_order(make_order(seller_id="seller-002", created_at=base))
    await orders_db.update_status(new.id, OrderStatus.RECEIVED)

    mine = await orders_db.list_orders(seller_id="seller-001")
    assert [o.id for o in mine] == [new.id, old.id]

    received = await orders_db.list_orders(status=OrderStatus.RECEIVED)
    assert [o.id for o in received] == [new.id]

    assert len(await orders_db.list_orders(limit=1)) == 1
