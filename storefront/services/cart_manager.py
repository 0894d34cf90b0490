"""Cart Manager

Single in-memory cart for this device. Mutations are gated by the stock
cache and persisted through the cart store.
"""

import logging
from typing import Iterable, Optional

from ..database.carts import CartStore
from ..errors import CartNotInitialized, InsufficientStock, OutOfStock
from ..models.cart import CartEntry
from ..models.product import Product
from .stock_cache import StockCache, StockSubscription

logger = logging.getLogger(__name__)


class CartManager:
    """Owns cart entries, quantity changes and derived totals"""

    def __init__(self, stock_cache: StockCache, cart_store: CartStore):
        self.stock_cache = stock_cache
        self.cart_store = cart_store
        self._entries: list[CartEntry] = []
        self._watches: dict[str, StockSubscription] = {}
        self._initialized = False

    def initialize(self) -> None:
        """Load the saved cart; runs once per process"""
        if self._initialized:
            return
        self._entries = self.cart_store.load()
        self._initialized = True
        for entry in self._entries:
            self._watch(entry.product_id)
        logger.info(f"Cart initialized with {len(self._entries)} items")

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ==================== Mutations ====================

    def add_to_cart(self, product: Product, quantity: int = 1) -> CartEntry:
        """
        Add a product, merging with an existing entry.

        Raises:
            OutOfStock: the quantity is not available
            InsufficientStock: existing plus new quantity is not available
        """
        self._require_initialized()
        logger.info(f"Adding to cart: {product.name} x{quantity}")

        if not self.stock_cache.is_in_stock(product.id, quantity):
            raise OutOfStock(product.id, product.name)

        existing = self._find(product.id)
        if existing:
            requested = existing.quantity + quantity
            if not self.stock_cache.is_in_stock(product.id, requested):
                raise InsufficientStock(product.id, product.name, product.stock)
            # Live check passed; the snapshot's stock still caps the quantity
            new_quantity = min(requested, product.stock)
            if new_quantity < 1:
                raise OutOfStock(product.id, product.name)
            existing.quantity = new_quantity
            entry = existing
        else:
            new_quantity = min(quantity, product.stock)
            if new_quantity < 1:
                raise OutOfStock(product.id, product.name)
            entry = CartEntry(product_id=product.id, product=product, quantity=new_quantity)
            self._entries.append(entry)
            self._watch(product.id)

        self._save()
        return entry.model_copy()

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartEntry]:
        """
        Set an entry's quantity; zero or less removes it.

        Quantities that are not in stock are ignored without error.
        """
        self._require_initialized()

        if quantity <= 0:
            self.remove_from_cart(product_id)
            return None

        entry = self._find(product_id)
        if not entry:
            return None

        if not self.stock_cache.is_in_stock(product_id, quantity):
            logger.warning(f"Insufficient stock for {product_id} x{quantity}, ignoring")
            return entry.model_copy()

        new_quantity = min(quantity, entry.product.stock)
        if new_quantity >= 1:
            entry.quantity = new_quantity
            self._save()
        return entry.model_copy()

    def remove_from_cart(self, product_id: str) -> None:
        self._require_initialized()
        entry = self._find(product_id)
        if not entry:
            return
        self._entries.remove(entry)
        self._unwatch(product_id)
        self._save()

    def remove_many(self, product_ids: Iterable[str]) -> None:
        """Remove several entries with a single save"""
        self._require_initialized()
        doomed = set(product_ids)
        kept = [e for e in self._entries if e.product_id not in doomed]
        if len(kept) == len(self._entries):
            return
        for entry in self._entries:
            if entry.product_id in doomed:
                self._unwatch(entry.product_id)
        self._entries = kept
        self._save()

    def clear_cart(self) -> None:
        """Empty the cart and drop the saved copy"""
        self._require_initialized()
        for product_id in list(self._watches):
            self._unwatch(product_id)
        self._entries = []
        self.cart_store.clear()
        logger.info("Cart cleared")

    # ==================== Queries ====================

    @property
    def items(self) -> list[CartEntry]:
        """Entries with the product stock replaced by the live value when known"""
        result = []
        for entry in self._entries:
            live = self.stock_cache.get_stock(entry.product_id)
            if live is None:
                result.append(entry.model_copy(deep=True))
            else:
                product = entry.product.model_copy(update={"stock": live})
                result.append(entry.model_copy(update={"product": product}))
        return result

    @property
    def total_amount(self) -> float:
        return sum(entry.product.price * entry.quantity for entry in self._entries)

    @property
    def total_items(self) -> int:
        return sum(entry.quantity for entry in self._entries)

    def is_in_cart(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    def get_cart_item_quantity(self, product_id: str) -> int:
        entry = self._find(product_id)
        return entry.quantity if entry else 0

    def __len__(self) -> int:
        return len(self._entries)

    # ==================== Internals ====================

    def _find(self, product_id: str) -> Optional[CartEntry]:
        return next((e for e in self._entries if e.product_id == product_id), None)

    def _require_initialized(self) -> None:
        # Saving before load() would overwrite the stored cart with an empty one
        if not self._initialized:
            raise CartNotInitialized()

    def _save(self) -> None:
        self.cart_store.save(self._entries)

    def _watch(self, product_id: str) -> None:
        if product_id not in self._watches:
            self._watches[product_id] = self.stock_cache.subscribe([product_id], lambda _stock: None)

    def _unwatch(self, product_id: str) -> None:
        subscription = self._watches.pop(product_id, None)
        if subscription:
            subscription.unsubscribe()
