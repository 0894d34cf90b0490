"""
Checkout Orchestrator

Turns the cart into one order per seller.

Validation runs in two phases before anything is written:

1. validate_destination: the PIN code must exist according to the postal
   code reference (asynchronous, external).
2. validate_cart: customer details, live stock and seller coverage
   (synchronous, local).

Each seller's order is then placed as a small saga: the order is created
as ``pending``, stock is reduced, and the order moves to ``received``. If
the stock reduction fails the order is marked ``failed`` instead; if the
confirmation fails the stock is restored first. Sellers are processed
concurrently and one seller's failure never undoes another's order.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from ..database.orders import OrderDatabase
from ..errors import (
    EmptyCart,
    InsufficientStock,
    InvalidPhone,
    InvalidPincode,
    MissingCustomerDetails,
    NoDeliveryInfo,
    PincodeNotServiceable,
    StockReductionFailed,
)
from ..models.cart import CartEntry
from ..models.checkout import (
    CheckoutResult,
    CustomerDetails,
    Order,
    OrderItem,
    OrderStatus,
    SellerOutcome,
)
from ..utils.order_id import generate_unique_order_id, order_qr_payload
from .cart_manager import CartManager
from .notifications import NotificationCenter
from .pincode import PostalCodeReference
from .stock_cache import StockCache
from .stock_reduction import StockReductionService

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")

ORDERS_PLACED_MESSAGE = "Orders placed successfully! You will receive confirmation shortly."
CHECKOUT_FAILED_MESSAGE = "Failed to place orders. Please try again."

REQUIRED_CUSTOMER_FIELDS = (
    ("name", "Name"),
    ("phone", "Phone number"),
    ("address", "Address"),
    ("pincode", "PIN code"),
)


def group_by_seller(entries: list[CartEntry]) -> dict[str, list[CartEntry]]:
    """Group cart entries by seller, keeping first-seen order"""
    groups: dict[str, list[CartEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.product.seller_id, []).append(entry)
    return groups


def build_seller_order(
    seller_id: str,
    entries: list[CartEntry],
    customer: CustomerDetails,
    now: Optional[datetime] = None,
) -> Order:
    """Snapshot one seller's cart lines into a pending order"""
    now = now or datetime.now(timezone.utc)
    seller_name = entries[0].product.seller_name
    order_id = generate_unique_order_id(customer.pincode)

    items = [
        OrderItem(
            product_id=entry.product_id,
            product_name=entry.product.name,
            price=entry.product.price,
            quantity=entry.quantity,
            unit=entry.product.unit,
        )
        for entry in entries
    ]

    return Order(
        order_id=order_id,
        customer_name=customer.name.strip(),
        customer_phone=customer.phone.strip(),
        customer_address=customer.address.strip(),
        customer_pincode=customer.pincode.strip(),
        seller_id=seller_id,
        seller_name=seller_name,
        seller_shop_name=seller_name,
        items=items,
        total_amount=sum(item.price * item.quantity for item in items),
        status=OrderStatus.PENDING,
        qr_code=order_qr_payload(order_id),
        created_at=now,
        updated_at=now,
    )


class CheckoutOrchestrator:
    """Validates the cart and places per-seller orders"""

    def __init__(
        self,
        cart: CartManager,
        stock_cache: StockCache,
        stock_service: StockReductionService,
        orders: OrderDatabase,
        pincodes: PostalCodeReference,
        notifications: Optional[NotificationCenter] = None,
        timeout: Optional[float] = 10.0,
    ):
        self.cart = cart
        self.stock_cache = stock_cache
        self.stock_service = stock_service
        self.orders = orders
        self.pincodes = pincodes
        self.notifications = notifications
        self.timeout = timeout
        # One checkout at a time: the cart is shared
        self._lock = asyncio.Lock()

    async def checkout(self, customer: CustomerDetails) -> CheckoutResult:
        """
        Place orders for everything in the cart.

        A checkout that starts while another is running waits for it and
        then sees the cart it left behind.

        Raises:
            CheckoutValidationError: a pre-flight check failed; nothing was written
        """
        async with self._lock:
            return await self._checkout(customer)

    async def _checkout(self, customer: CustomerDetails) -> CheckoutResult:
        entries = self.cart.items
        if not entries:
            raise EmptyCart()

        await self.validate_destination(customer.pincode)
        self.validate_cart(customer, entries)

        groups = group_by_seller(entries)
        outcomes = list(
            await asyncio.gather(
                *(
                    self._place_seller_order(seller_id, seller_entries, customer)
                    for seller_id, seller_entries in groups.items()
                )
            )
        )
        orders = [o.order for o in outcomes if o.success and o.order]

        if all(o.success for o in outcomes):
            self.cart.clear_cart()
            logger.info(f"Checkout complete: {len(orders)} orders placed")
            return CheckoutResult(
                success=True,
                orders=orders,
                outcomes=outcomes,
                message=ORDERS_PLACED_MESSAGE,
            )

        failed = [o.seller_id for o in outcomes if not o.success]
        logger.warning(
            f"Checkout partially failed: {len(orders)} placed, sellers failed: {failed}"
        )
        # Keep only what still needs ordering so a retry does not duplicate orders
        self.cart.remove_many(
            entry.product_id
            for outcome in outcomes
            if outcome.success
            for entry in groups[outcome.seller_id]
        )
        return CheckoutResult(
            success=False,
            orders=orders,
            outcomes=outcomes,
            message=CHECKOUT_FAILED_MESSAGE,
        )

    # ==================== Validation ====================

    async def validate_destination(self, pincode: str) -> None:
        """Phase 1: the PIN code must exist"""
        pincode = (pincode or "").strip()
        try:
            valid = await asyncio.wait_for(
                self.pincodes.is_pincode_valid(pincode), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Timed out validating pincode {pincode}")
            valid = False
        except Exception as e:
            logger.error(f"Error validating pincode {pincode}: {e!r}")
            valid = False

        if not valid:
            raise InvalidPincode(pincode)

    def validate_cart(self, customer: CustomerDetails, entries: list[CartEntry]) -> None:
        """Phase 2: customer details, stock and delivery coverage"""
        for field_name, label in REQUIRED_CUSTOMER_FIELDS:
            if not getattr(customer, field_name).strip():
                raise MissingCustomerDetails(label)

        if not PHONE_PATTERN.match(customer.phone.strip()):
            raise InvalidPhone()

        for entry in entries:
            if not self.stock_cache.is_in_stock(entry.product_id, entry.quantity):
                raise InsufficientStock(
                    entry.product_id,
                    entry.product.name,
                    self.stock_cache.get_stock(entry.product_id),
                )

        pincode = customer.pincode.strip()
        unavailable: list[str] = []
        for seller_entries in group_by_seller(entries).values():
            # Missing coverage is a hard failure, not an empty match
            if any(not entry.product.covered_pincodes for entry in seller_entries):
                raise NoDeliveryInfo(seller_entries[0].product.seller_name)
            unavailable.extend(
                entry.product.name
                for entry in seller_entries
                if pincode not in entry.product.covered_pincodes
            )

        if unavailable:
            raise PincodeNotServiceable(pincode, unavailable)

    # ==================== Order saga ====================

    async def _place_seller_order(
        self,
        seller_id: str,
        entries: list[CartEntry],
        customer: CustomerDetails,
    ) -> SellerOutcome:
        seller_name = entries[0].product.seller_name
        order = build_seller_order(seller_id, entries, customer)

        try:
            order = await asyncio.wait_for(self.orders.create_order(order), timeout=self.timeout)
        except Exception as e:
            logger.error(f"Error creating order for seller {seller_id}: {e!r}")
            return SellerOutcome(
                seller_id=seller_id,
                seller_name=seller_name,
                success=False,
                error_message="Order could not be created",
            )

        logger.info(f"Order {order.order_id} created for {seller_name}: ₹{order.total_amount:.2f}")

        if not await self.stock_service.reduce_stock_for_order(order.items, order.order_id):
            error = StockReductionFailed(order.order_id)
            order = await self._mark_failed(order, str(error))
            return SellerOutcome(
                seller_id=seller_id,
                seller_name=seller_name,
                success=False,
                order=order,
                error_message=str(error),
            )

        try:
            order = await asyncio.wait_for(
                self.orders.update_status(order.id, OrderStatus.RECEIVED),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.error(f"Error confirming order {order.order_id}, restoring stock: {e!r}")
            await self.stock_service.restore_stock_for_order(order.items, order.order_id)
            order = await self._mark_failed(order, "Order could not be confirmed")
            return SellerOutcome(
                seller_id=seller_id,
                seller_name=seller_name,
                success=False,
                order=order,
                error_message="Order could not be confirmed",
            )

        if self.notifications:
            self.notifications.notify_new_order(order)

        return SellerOutcome(seller_id=seller_id, seller_name=seller_name, success=True, order=order)

    async def _mark_failed(self, order: Order, reason: str) -> Order:
        try:
            return await asyncio.wait_for(
                self.orders.update_status(order.id, OrderStatus.FAILED, reason),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.error(f"Could not mark order {order.order_id} as failed: {e!r}")
            return order
