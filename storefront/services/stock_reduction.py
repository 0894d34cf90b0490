"""Stock Reduction Service

Applies batches of signed stock deltas to the product documents and raises
low-stock alerts for sellers.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from ..database.products import PRODUCTS_COLLECTION
from ..database.store import DocumentStore
from ..models.stock import LowStockAlert, StockDelta

logger = logging.getLogger(__name__)

AlertListener = Callable[[LowStockAlert], None]


class StockLine(Protocol):
    product_id: str
    quantity: int


class StockReductionService:
    """Writes stock changes atomically per batch"""

    def __init__(
        self,
        store: DocumentStore,
        low_stock_threshold: int = 5,
        timeout: Optional[float] = 10.0,
    ):
        self.store = store
        self.low_stock_threshold = low_stock_threshold
        self.timeout = timeout
        self._alerts: dict[str, LowStockAlert] = {}
        self._alert_listeners: list[AlertListener] = []
        # Stock is read and then written back as an absolute value
        self._lock = asyncio.Lock()

    async def apply_deltas(self, deltas: Iterable[StockDelta], order_id: Optional[str] = None) -> bool:
        """
        Apply stock deltas in one atomic batch.

        Positive quantity_change removes stock, negative adds it back.
        Stock never goes below zero; a delta larger than the stock empties
        it and the batch still succeeds.

        Returns:
            False if nothing was written (stock is then NOT updated)
        """
        try:
            await asyncio.wait_for(self._apply(list(deltas), order_id), timeout=self.timeout)
            return True
        except asyncio.TimeoutError:
            logger.error(f"Timed out updating stock (order {order_id})")
            return False
        except Exception as e:
            logger.error(f"Error updating stock (order {order_id}): {e}")
            return False

    async def _apply(self, deltas: list[StockDelta], order_id: Optional[str]) -> None:
        async with self._lock:
            await self._commit_deltas(deltas, order_id)

    async def _commit_deltas(self, deltas: list[StockDelta], order_id: Optional[str]) -> None:
        # One staged write per product
        changes: dict[str, int] = {}
        for delta in deltas:
            changes[delta.product_id] = changes.get(delta.product_id, 0) + delta.quantity_change

        batch = self.store.batch()
        updated: dict[str, int] = {}
        alerts: list[LowStockAlert] = []
        now = datetime.now(timezone.utc)

        for product_id, quantity_change in changes.items():
            data = await self.store.get_document(PRODUCTS_COLLECTION, product_id)
            if data is None:
                logger.error(f"Product {product_id} not found")
                continue

            current_stock = int(data.get("stock") or 0)
            new_stock = max(0, current_stock - quantity_change)

            fields = {"stock": new_stock, "updated_at": now, "last_stock_update": now}
            if order_id:
                fields["last_order_id"] = order_id
            batch.update(PRODUCTS_COLLECTION, product_id, fields)
            updated[product_id] = new_stock

            if new_stock <= self.low_stock_threshold < current_stock:
                alerts.append(
                    LowStockAlert(
                        product_id=product_id,
                        product_name=data.get("name") or "Unknown Product",
                        current_stock=new_stock,
                        threshold=self.low_stock_threshold,
                        seller_id=data.get("seller_id"),
                    )
                )

        if len(batch):
            await batch.commit()

        for alert in alerts:
            self._raise_alert(alert)

        logger.info(f"Stock updated: {updated}")

    async def reduce_stock_for_order(self, items: Iterable[StockLine], order_id: str) -> bool:
        """Remove ordered quantities from stock"""
        deltas = [StockDelta(product_id=i.product_id, quantity_change=i.quantity) for i in items]
        return await self.apply_deltas(deltas, order_id)

    async def restore_stock_for_order(self, items: Iterable[StockLine], order_id: str) -> bool:
        """Put an order's quantities back into stock"""
        deltas = [StockDelta(product_id=i.product_id, quantity_change=-i.quantity) for i in items]
        return await self.apply_deltas(deltas, order_id)

    async def update_stock(self, product_id: str, new_stock: int) -> bool:
        """Set stock directly (seller restock)"""
        now = datetime.now(timezone.utc)
        try:
            await asyncio.wait_for(
                self._set_stock(
                    product_id,
                    {"stock": new_stock, "updated_at": now, "last_stock_update": now},
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Timed out setting stock for {product_id}")
            return False
        except Exception as e:
            logger.error(f"Error setting stock for {product_id}: {e}")
            return False

        if new_stock > self.low_stock_threshold:
            self.dismiss_low_stock_alert(product_id)
        return True

    async def _set_stock(self, product_id: str, fields: dict) -> None:
        async with self._lock:
            await self.store.update_document(PRODUCTS_COLLECTION, product_id, fields)

    # ==================== Alerts ====================

    @property
    def low_stock_alerts(self) -> list[LowStockAlert]:
        return list(self._alerts.values())

    def add_alert_listener(self, listener: AlertListener) -> None:
        self._alert_listeners.append(listener)

    def dismiss_low_stock_alert(self, product_id: str) -> bool:
        return self._alerts.pop(product_id, None) is not None

    def _raise_alert(self, alert: LowStockAlert) -> None:
        self._alerts[alert.product_id] = alert
        logger.warning(
            f"Low stock: {alert.product_name} ({alert.product_id}) at {alert.current_stock}"
        )
        for listener in self._alert_listeners:
            try:
                listener(alert)
            except Exception:
                logger.exception("Low stock listener raised")
