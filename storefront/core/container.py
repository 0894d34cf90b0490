"""Wiring of the storefront's stores and services"""

from dataclasses import dataclass

from fastapi import Request

from ..database.carts import CartStore, LocalStorage
from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase
from ..database.store import DocumentStore
from ..services.cart_manager import CartManager
from ..services.checkout import CheckoutOrchestrator
from ..services.notifications import NotificationCenter
from ..services.pincode import PincodeDirectory, PostalCodeReference, StaticPincodeDirectory
from ..services.stock_cache import StockCache
from ..services.stock_reduction import StockReductionService
from .config import Settings


@dataclass
class Services:
    """Everything a request handler may need"""
    settings: Settings
    store: DocumentStore
    products: ProductDatabase
    orders: OrderDatabase
    stock_cache: StockCache
    stock: StockReductionService
    cart: CartManager
    pincodes: PostalCodeReference
    notifications: NotificationCenter
    checkout: CheckoutOrchestrator

    async def close(self) -> None:
        self.stock_cache.close()
        await self.pincodes.close()


def build_services(settings: Settings) -> Services:
    store = DocumentStore()
    stock_cache = StockCache(store, settings.assume_in_stock_when_unknown)
    stock = StockReductionService(
        store,
        low_stock_threshold=settings.low_stock_threshold,
        timeout=settings.io_timeout_seconds,
    )
    cart = CartManager(
        stock_cache,
        CartStore(LocalStorage(settings.cart_storage_path), settings.cart_storage_key),
    )

    if settings.pincode_offline:
        pincodes: PostalCodeReference = StaticPincodeDirectory(
            cache_ttl_seconds=settings.pincode_cache_ttl_seconds
        )
    else:
        pincodes = PincodeDirectory(
            base_url=settings.pincode_api_base_url,
            cache_ttl_seconds=settings.pincode_cache_ttl_seconds,
            timeout=settings.io_timeout_seconds,
        )

    notifications = NotificationCenter()
    stock.add_alert_listener(notifications.notify_low_stock)

    orders = OrderDatabase(store)
    checkout = CheckoutOrchestrator(
        cart=cart,
        stock_cache=stock_cache,
        stock_service=stock,
        orders=orders,
        pincodes=pincodes,
        notifications=notifications,
        timeout=settings.io_timeout_seconds,
    )

    return Services(
        settings=settings,
        store=store,
        products=ProductDatabase(store),
        orders=orders,
        stock_cache=stock_cache,
        stock=stock,
        cart=cart,
        pincodes=pincodes,
        notifications=notifications,
        checkout=checkout,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's services"""
    return request.app.state.services
