# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.database.carts import CartStore, LocalStorage
from storefront.database.orders import OrderDatabase
from storefront.database.products import ProductDatabase
from storefront.database.store import DocumentStore
from storefront.main import create_app
from storefront.models.checkout import CustomerDetails
from storefront.models.product import Product, ProductCategory
from storefront.services.cart_manager import CartManager
from storefront.services.checkout import CheckoutOrchestrator
from storefront.services.notifications import NotificationCenter
from storefront.services.pincode import StaticPincodeDirectory
from storefront.services.stock_cache import StockCache
from storefront.services.stock_reduction import StockReductionService


def make_product(product_id: str, seller_id: str = "seller-001", **overrides) -> Product:
    """Small product factory; defaults to a seller covering 380052"""
    data = dict(
        id=product_id,
        seller_id=seller_id,
        seller_name=f"Shop {seller_id}",
        name=f"Product {product_id}",
        category=ProductCategory.FERTILIZERS,
        price=100.0,
        unit="bag",
        stock=10,
        covered_pincodes=["380052"],
    )
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def products_db(store):
    return ProductDatabase(store)


@pytest.fixture
def orders_db(store):
    return OrderDatabase(store)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def cart_store(storage):
    return CartStore(storage)


@pytest.fixture
def stock_cache(store):
    cache = StockCache(store)
    yield cache
    cache.close()


@pytest.fixture
def stock_service(store):
    return StockReductionService(store, low_stock_threshold=5, timeout=2.0)


@pytest.fixture
def cart(stock_cache, cart_store):
    manager = CartManager(stock_cache, cart_store)
    manager.initialize()
    return manager


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def orchestrator(cart, stock_cache, stock_service, orders_db, notifications):
    return CheckoutOrchestrator(
        cart=cart,
        stock_cache=stock_cache,
        stock_service=stock_service,
        orders=orders_db,
        pincodes=StaticPincodeDirectory(),
        notifications=notifications,
        timeout=2.0,
    )


@pytest.fixture
def customer():
    return CustomerDetails(
        name="Ramesh Patel",
        phone="9876543210",
        address="12 Station Road, Gandhinagar",
        pincode="380052",
    )


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        cart_storage_path=str(tmp_path / "local_storage.json"),
        pincode_offline=True,
        seed_catalog=True,
        debug=False,
    )


@pytest.fixture
def client(test_settings):
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client
