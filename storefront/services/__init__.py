# Services

from .stock_cache import StockCache, StockSubscription
from .stock_reduction import StockReductionService
from .cart_manager import CartManager
from .pincode import PincodeDirectory, StaticPincodeDirectory, PincodeInfo
from .notifications import NotificationCenter, Notification, NotificationType
from .checkout import CheckoutOrchestrator

__all__ = [
    "StockCache",
    "StockSubscription",
    "StockReductionService",
    "CartManager",
    "PincodeDirectory",
    "StaticPincodeDirectory",
    "PincodeInfo",
    "NotificationCenter",
    "Notification",
    "NotificationType",
    "CheckoutOrchestrator",
]
