# Storefront Models

from .product import (
    Product,
    ProductCategory,
    ProductSearchResponse,
    SellerCoverageRequest,
    SellerCoverageResponse,
)
from .cart import CartEntry, AddToCartRequest, UpdateCartItemRequest, CartResponse
from .checkout import (
    ORDER_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    CustomerDetails,
    CheckoutRequest,
    CheckoutResult,
    SellerOutcome,
    StatusUpdateRequest,
    UPIPaymentResponse,
    can_transition,
)
from .stock import StockDelta, LowStockAlert, StockLevelResponse, RestockRequest

__all__ = [
    "Product",
    "ProductCategory",
    "ProductSearchResponse",
    "SellerCoverageRequest",
    "SellerCoverageResponse",
    "CartEntry",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "ORDER_TRANSITIONS",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "CustomerDetails",
    "CheckoutRequest",
    "CheckoutResult",
    "SellerOutcome",
    "StatusUpdateRequest",
    "UPIPaymentResponse",
    "can_transition",
    "StockDelta",
    "LowStockAlert",
    "StockLevelResponse",
    "RestockRequest",
]
