"""Domain errors raised by the cart, checkout and order layers"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront errors"""
    pass


# ==================== Cart ====================

class CartError(StorefrontError):
    """Cart mutation errors"""
    pass


class CartNotInitialized(CartError):
    """Cart was mutated before the persisted snapshot finished loading"""

    def __init__(self):
        super().__init__("Cart is still loading, try again")


class OutOfStock(CartError):
    """Product has no stock for the requested quantity"""

    def __init__(self, product_id: str, product_name: str):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"{product_name} is out of stock or insufficient quantity available")


class InsufficientStock(CartError):
    """Requested total exceeds the available stock"""

    def __init__(self, product_id: str, product_name: str, available: Optional[int] = None):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        if available is None:
            message = f"Insufficient stock for {product_name}"
        else:
            message = f"Only {available} units available for {product_name}"
        super().__init__(message)


# ==================== Checkout ====================

class CheckoutValidationError(StorefrontError):
    """Pre-flight checkout validation failed; nothing was written"""
    pass


class EmptyCart(CheckoutValidationError):
    def __init__(self):
        super().__init__("Cart is empty")


class MissingCustomerDetails(CheckoutValidationError):
    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} is required")


class InvalidPhone(CheckoutValidationError):
    def __init__(self):
        super().__init__("Invalid phone number")


class InvalidPincode(CheckoutValidationError):
    def __init__(self, pincode: str):
        self.pincode = pincode
        super().__init__(f"Invalid PIN code {pincode}")


class NoDeliveryInfo(CheckoutValidationError):
    """A seller in the cart has no coverage list at all"""

    def __init__(self, seller_name: str):
        self.seller_name = seller_name
        super().__init__(f"{seller_name} has not configured delivery areas")


class PincodeNotServiceable(CheckoutValidationError):
    def __init__(self, pincode: str, product_names: list[str]):
        self.pincode = pincode
        self.product_names = product_names
        super().__init__(f"Some products are not available for PIN code {pincode}")


class StockReductionFailed(StorefrontError):
    """Stock could not be updated for an order"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Stock was not updated for order {order_id}")


# ==================== Orders ====================

class OrderError(StorefrontError):
    """Order lookup and lifecycle errors"""
    pass


class OrderNotFound(OrderError):
    def __init__(self, order_ref: str):
        self.order_ref = order_ref
        super().__init__(f"Order {order_ref} not found")


class InvalidStatusTransition(OrderError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from {current} to {requested}")
