# Database modules

from .store import DocumentStore, WriteBatch, StoreError, DocumentNotFound
from .products import ProductDatabase, PRODUCTS, PRODUCTS_COLLECTION
from .carts import CartStore, LocalStorage
from .orders import OrderDatabase, ORDERS_COLLECTION

__all__ = [
    "DocumentStore",
    "WriteBatch",
    "StoreError",
    "DocumentNotFound",
    "ProductDatabase",
    "PRODUCTS",
    "PRODUCTS_COLLECTION",
    "CartStore",
    "LocalStorage",
    "OrderDatabase",
    "ORDERS_COLLECTION",
]
