"""Order storage for the storefront"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import InvalidStatusTransition, OrderError, OrderNotFound
from ..models.checkout import Order, OrderStatus, can_transition
from .store import DocumentStore

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"

# Timestamp field stamped when an order enters each status
STATUS_TIMESTAMPS = {
    OrderStatus.PACKED: "packed_at",
    OrderStatus.OUT_FOR_DELIVERY: "out_for_delivery_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.NOT_DELIVERED: "not_delivered_at",
    OrderStatus.FAILED: "failed_at",
}


class OrderDatabase:
    """Order records over the document store"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_order(self, order: Order) -> Order:
        """Persist a new order and return it with its document ID"""
        doc_id = await self.store.add_document(
            ORDERS_COLLECTION, order.model_dump(exclude={"id"})
        )
        return order.model_copy(update={"id": doc_id})

    async def get_order(self, doc_id: str) -> Optional[Order]:
        """Get an order by document ID"""
        data = await self.store.get_document(ORDERS_COLLECTION, doc_id)
        if data is None:
            return None
        return Order.model_validate({**data, "id": doc_id})

    async def find_by_order_id(self, order_id: str) -> Optional[Order]:
        """Look up an order by its printed order identifier"""
        for doc_id, data in await self.store.list_documents(ORDERS_COLLECTION):
            if data.get("order_id") == order_id:
                return Order.model_validate({**data, "id": doc_id})
        return None

    async def list_orders(
        self,
        seller_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
    ) -> list[Order]:
        """List recent orders, newest first"""
        orders = [
            Order.model_validate({**data, "id": doc_id})
            for doc_id, data in await self.store.list_documents(ORDERS_COLLECTION)
        ]
        if seller_id:
            orders = [o for o in orders if o.seller_id == seller_id]
        if status:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]

    async def update_status(
        self,
        doc_id: str,
        status: OrderStatus,
        reason: Optional[str] = None,
    ) -> Order:
        """
        Move an order to a new status.

        Raises:
            OrderNotFound: no order with this document ID
            InvalidStatusTransition: the move is not allowed from the current status
        """
        order = await self.get_order(doc_id)
        if not order:
            raise OrderNotFound(doc_id)

        if not can_transition(order.status, status):
            raise InvalidStatusTransition(order.status.value, status.value)

        now = datetime.now(timezone.utc)
        fields: dict[str, Any] = {"status": status, "updated_at": now}

        timestamp_field = STATUS_TIMESTAMPS.get(status)
        if timestamp_field:
            fields[timestamp_field] = now

        if status == OrderStatus.NOT_DELIVERED:
            if not reason or not reason.strip():
                raise OrderError("A reason is required when an order is not delivered")
            fields["not_delivered_reason"] = reason.strip()
        elif status == OrderStatus.FAILED:
            fields["failure_reason"] = reason
        elif status == OrderStatus.OUT_FOR_DELIVERY and order.status == OrderStatus.NOT_DELIVERED:
            fields["retry_attempts"] = order.retry_attempts + 1

        await self.store.update_document(ORDERS_COLLECTION, doc_id, fields)
        logger.info(f"Order {order.order_id}: {order.status.value} -> {status.value}")
        return order.model_copy(update=fields)
