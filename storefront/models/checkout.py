"""Checkout and order models for the storefront"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    PACKED = "packed"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    NOT_DELIVERED = "not_delivered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        # not_delivered can still be retried, see ORDER_TRANSITIONS
        return not ORDER_TRANSITIONS[self]


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.RECEIVED, OrderStatus.FAILED}),
    OrderStatus.RECEIVED: frozenset({OrderStatus.PACKED}),
    OrderStatus.PACKED: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.NOT_DELIVERED}),
    OrderStatus.NOT_DELIVERED: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Check whether an order may move from current to requested"""
    return requested in ORDER_TRANSITIONS[current]


class PaymentMethod(str, Enum):
    COD = "cod"


class CustomerDetails(BaseModel):
    """Delivery details entered at checkout"""
    name: str = ""
    phone: str = ""
    address: str = ""
    pincode: str = ""


class OrderItem(BaseModel):
    """Item in an order, copied from the cart at checkout"""
    product_id: str
    product_name: str
    price: float
    quantity: int
    unit: str


class Order(BaseModel):
    """Order for a single seller"""
    id: Optional[str] = None
    order_id: str
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_pincode: str
    seller_id: str
    seller_name: str
    seller_shop_name: str
    items: list[OrderItem]
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.COD
    qr_code: Optional[str] = None
    failure_reason: Optional[str] = None
    not_delivered_reason: Optional[str] = None
    retry_attempts: int = 0
    created_at: datetime
    updated_at: datetime
    packed_at: Optional[datetime] = None
    out_for_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    not_delivered_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


class CheckoutRequest(BaseModel):
    """Request to checkout the current cart"""
    customer: CustomerDetails


class SellerOutcome(BaseModel):
    """What happened to one seller's share of the cart"""
    seller_id: str
    seller_name: str
    success: bool
    order: Optional[Order] = None
    error_message: Optional[str] = None


class CheckoutResult(BaseModel):
    """Response from checkout"""
    success: bool
    orders: list[Order] = []
    outcomes: list[SellerOutcome] = []
    message: str


class StatusUpdateRequest(BaseModel):
    """Request to move an order to a new status"""
    status: OrderStatus
    reason: Optional[str] = None


class UPIPaymentResponse(BaseModel):
    """Scannable UPI payload for collecting an order's amount"""
    order_id: str
    amount: float
    upi_url: str
