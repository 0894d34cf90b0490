# tests/test_cart_manager.py
import pytest

from storefront.database.products import PRODUCTS_COLLECTION
from storefront.errors import CartNotInitialized, InsufficientStock, OutOfStock
from storefront.services.cart_manager import CartManager
from storefront.services.stock_cache import StockCache

from .conftest import make_product


# --- Adding ---

def test_add_merges_into_single_entry(cart):
    product = make_product("p1", stock=10)

    cart.add_to_cart(product, 3)
    cart.add_to_cart(product, 4)

    assert len(cart) == 1
    assert cart.get_cart_item_quantity("p1") == 7


def test_add_clamps_to_snapshot_stock_when_live_stock_unknown(cart):
    """Unknown stock passes the gate, the product snapshot still caps the line"""
    product = make_product("p1", stock=10)

    entry = cart.add_to_cart(product, 15)

    assert entry.quantity == 10
    assert cart.stock_cache.get_stock("p1") is None


def test_merge_clamps_to_snapshot_stock(cart):
    product = make_product("p1", stock=10)

    cart.add_to_cart(product, 6)
    entry = cart.add_to_cart(product, 6)

    assert entry.quantity == 10
    assert len(cart) == 1


def test_add_with_zero_snapshot_stock_is_rejected(cart):
    product = make_product("p1", stock=0)

    with pytest.raises(OutOfStock):
        cart.add_to_cart(product, 1)
    assert len(cart) == 0


@pytest.mark.asyncio
async def test_add_rejected_when_live_stock_too_low(cart, products_db):
    product = await products_db.add_product(make_product("p1", stock=3))

    cart.add_to_cart(product, 1)
    assert cart.stock_cache.get_stock("p1") == 3

    with pytest.raises(OutOfStock):
        cart.add_to_cart(product, 5)
    assert cart.get_cart_item_quantity("p1") == 1


@pytest.mark.asyncio
async def test_merge_rejected_when_total_exceeds_live_stock(cart, products_db):
    product = await products_db.add_product(make_product("p1", stock=3))
    cart.add_to_cart(product, 2)

    with pytest.raises(InsufficientStock) as exc_info:
        cart.add_to_cart(product, 2)

    assert str(exc_info.value) == "Only 3 units available for Product p1"
    assert cart.get_cart_item_quantity("p1") == 2


def test_unknown_stock_rejected_when_fail_closed(store, cart_store):
    cache = StockCache(store, assume_in_stock_when_unknown=False)
    manager = CartManager(cache, cart_store)
    manager.initialize()

    with pytest.raises(OutOfStock):
        manager.add_to_cart(make_product("p1"), 1)


def test_mutations_before_initialize_are_rejected(stock_cache, cart_store):
    manager = CartManager(stock_cache, cart_store)

    with pytest.raises(CartNotInitialized):
        manager.add_to_cart(make_product("p1"), 1)
    with pytest.raises(CartNotInitialized):
        manager.update_quantity("p1", 2)
    with pytest.raises(CartNotInitialized):
        manager.clear_cart()


# --- Updating and removing ---

@pytest.mark.parametrize("quantity", [0, -1])
def test_update_to_zero_or_less_removes_entry(cart, quantity):
    cart.add_to_cart(make_product("p1"), 2)

    assert cart.update_quantity("p1", quantity) is None
    assert not cart.is_in_cart("p1")


def test_update_missing_entry_returns_none(cart):
    assert cart.update_quantity("nope", 3) is None
    assert len(cart) == 0


def test_update_clamps_to_snapshot_stock(cart):
    cart.add_to_cart(make_product("p1", stock=10), 2)

    entry = cart.update_quantity("p1", 25)

    assert entry.quantity == 10


@pytest.mark.asyncio
async def test_update_beyond_live_stock_is_ignored(cart, products_db):
    product = await products_db.add_product(make_product("p1", stock=4))
    cart.add_to_cart(product, 2)

    entry = cart.update_quantity("p1", 9)

    assert entry.quantity == 2
    assert cart.get_cart_item_quantity("p1") == 2


def test_remove_many_keeps_other_entries(cart):
    for pid in ("p1", "p2", "p3"):
        cart.add_to_cart(make_product(pid), 1)

    cart.remove_many(["p1", "p3"])

    assert [e.product_id for e in cart.items] == ["p2"]


# --- Queries ---

def test_totals(cart):
    cart.add_to_cart(make_product("p1", price=100.0), 2)
    cart.add_to_cart(make_product("p2", price=12.5), 4)

    assert cart.total_amount == 250.0
    assert cart.total_items == 6


@pytest.mark.asyncio
async def test_items_overlay_live_stock(cart, products_db, store):
    product = await products_db.add_product(make_product("p1", stock=10))
    cart.add_to_cart(product, 2)

    await store.update_document(PRODUCTS_COLLECTION, "p1", {"stock": 4})

    [entry] = cart.items
    assert entry.product.stock == 4
    # The stored snapshot is untouched
    assert cart._entries[0].product.stock == 10


# --- Subscriptions and persistence ---

@pytest.mark.asyncio
async def test_entries_are_watched_until_removed(cart, products_db, store):
    product = await products_db.add_product(make_product("p1"))

    cart.add_to_cart(product, 1)
    cart.add_to_cart(product, 1)
    assert store.listener_count(PRODUCTS_COLLECTION, "p1") == 1

    cart.remove_from_cart("p1")
    assert store.listener_count(PRODUCTS_COLLECTION, "p1") == 0


@pytest.mark.asyncio
async def test_clear_cart_drops_subscriptions_and_saved_copy(cart, products_db, store, storage):
    product = await products_db.add_product(make_product("p1"))
    cart.add_to_cart(product, 1)

    cart.clear_cart()

    assert len(cart) == 0
    assert store.listener_count(PRODUCTS_COLLECTION, "p1") == 0
    assert storage.get_item(cart.cart_store.key) is None


def test_cart_survives_restart(cart, stock_cache, cart_store):
    cart.add_to_cart(make_product("p1"), 2)
    cart.add_to_cart(make_product("p2", seller_id="seller-002"), 1)

    restored = CartManager(stock_cache, cart_store)
    restored.initialize()

    assert [(e.product_id, e.quantity) for e in restored.items] == [("p1", 2), ("p2", 1)]


def test_initialize_runs_once(cart, cart_store):
    cart.add_to_cart(make_product("p1"), 1)
    cart_store.clear()

    cart.initialize()

    assert cart.is_in_cart("p1")
