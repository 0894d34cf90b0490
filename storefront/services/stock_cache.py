"""
Stock Cache

Local, eventually consistent view of product stock fed by live document
subscriptions. One document subscription is shared by every listener
watching the same product and is torn down with the last of them.
"""

import itertools
import logging
from typing import Callable, Iterable, Optional

from ..database.products import PRODUCTS_COLLECTION
from ..database.store import DocumentStore

logger = logging.getLogger(__name__)

StockListener = Callable[[dict[str, int]], None]


class StockSubscription:
    """Handle returned by StockCache.subscribe; calling it unsubscribes"""

    def __init__(self, cache: "StockCache", listener_id: int, product_ids: frozenset[str]):
        self._cache = cache
        self._listener_id = listener_id
        self.product_ids = product_ids
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._cache._release(self._listener_id, self.product_ids)

    def __call__(self) -> None:
        self.unsubscribe()


class StockCache:
    """
    Last known stock per product.

    Stock that has not been delivered by a subscription yet is unknown
    (``get_stock`` returns None), which is not the same as zero.
    """

    def __init__(self, store: DocumentStore, assume_in_stock_when_unknown: bool = True):
        self.store = store
        self.assume_in_stock_when_unknown = assume_in_stock_when_unknown
        self._stock: dict[str, int] = {}
        self._refcounts: dict[str, int] = {}
        self._document_unsubscribes: dict[str, Callable[[], None]] = {}
        self._listeners: dict[int, tuple[frozenset[str], StockListener]] = {}
        self._listener_ids = itertools.count(1)

    # ==================== Subscriptions ====================

    def subscribe(self, product_ids: Iterable[str], on_update: StockListener) -> StockSubscription:
        """
        Watch stock for a set of products.

        on_update receives a copy of the whole accumulated mapping every
        time any watched product changes.
        """
        ids = frozenset(product_ids)
        listener_id = next(self._listener_ids)
        # Products someone else already watches will not get a fresh snapshot
        already_known = any(product_id in self._stock for product_id in ids)
        self._listeners[listener_id] = (ids, on_update)

        for product_id in ids:
            self._retain(product_id)

        if already_known:
            self._deliver(on_update)

        return StockSubscription(self, listener_id, ids)

    def _retain(self, product_id: str) -> None:
        self._refcounts[product_id] = self._refcounts.get(product_id, 0) + 1
        if self._refcounts[product_id] > 1:
            return

        def on_snapshot(snapshot: Optional[dict]) -> None:
            self._on_document(product_id, snapshot)

        self._document_unsubscribes[product_id] = self.store.subscribe_document(
            PRODUCTS_COLLECTION, product_id, on_snapshot
        )
        logger.debug(f"Subscribed to stock for {product_id}")

    def _release(self, listener_id: int, product_ids: frozenset[str]) -> None:
        self._listeners.pop(listener_id, None)
        for product_id in product_ids:
            remaining = self._refcounts.get(product_id, 0) - 1
            if remaining > 0:
                self._refcounts[product_id] = remaining
                continue
            self._refcounts.pop(product_id, None)
            self._stock.pop(product_id, None)
            unsubscribe = self._document_unsubscribes.pop(product_id, None)
            if unsubscribe:
                unsubscribe()
            logger.debug(f"Unsubscribed from stock for {product_id}")

    def _on_document(self, product_id: str, snapshot: Optional[dict]) -> None:
        if snapshot is None:
            # Missing or deleted: the product becomes unknown
            if self._stock.pop(product_id, None) is None:
                return
        else:
            self._stock[product_id] = int(snapshot.get("stock") or 0)
        for ids, listener in list(self._listeners.values()):
            if product_id in ids:
                self._deliver(listener)

    def _deliver(self, listener: StockListener) -> None:
        try:
            listener(dict(self._stock))
        except Exception:
            logger.exception("Stock listener raised")

    def close(self) -> None:
        """Tear down every document subscription"""
        for unsubscribe in self._document_unsubscribes.values():
            unsubscribe()
        self._document_unsubscribes.clear()
        self._refcounts.clear()
        self._listeners.clear()
        self._stock.clear()

    # ==================== Queries ====================

    def get_stock(self, product_id: str) -> Optional[int]:
        """Last known stock, or None when unknown locally"""
        return self._stock.get(product_id)

    def is_in_stock(self, product_id: str, requested_quantity: int = 1) -> bool:
        """Check whether the requested quantity is available"""
        current = self._stock.get(product_id)
        if current is None:
            return self.assume_in_stock_when_unknown
        return current >= requested_quantity

    def snapshot(self) -> dict[str, int]:
        return dict(self._stock)

    @property
    def subscribed_product_ids(self) -> set[str]:
        return set(self._refcounts)
