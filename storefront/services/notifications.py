"""Seller notifications for new orders and low stock"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..models.checkout import Order
from ..models.stock import LowStockAlert

MAX_NOTIFICATIONS = 50


class NotificationType(str, Enum):
    NEW_ORDER = "new_order"
    ORDER_UPDATE = "order_update"
    LOW_STOCK = "low_stock"


@dataclass
class Notification:
    type: NotificationType
    title: str
    message: str
    order_id: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    read: bool = False


class NotificationCenter:
    """Keeps the latest notifications per recipient, newest first"""

    def __init__(self, max_per_recipient: int = MAX_NOTIFICATIONS):
        self.max_per_recipient = max_per_recipient
        self._inbox: dict[str, list[Notification]] = {}

    def add(self, recipient_id: str, notification: Notification) -> Notification:
        inbox = self._inbox.setdefault(recipient_id, [])
        inbox.insert(0, notification)
        del inbox[self.max_per_recipient:]
        return notification

    def notify_new_order(self, order: Order) -> Notification:
        return self.add(
            order.seller_id,
            Notification(
                type=NotificationType.NEW_ORDER,
                title="New Order Received",
                message=f"Order {order.order_id} from {order.customer_name} - ₹{order.total_amount:.2f}",
                order_id=order.order_id,
            ),
        )

    def notify_low_stock(self, alert: LowStockAlert) -> Optional[Notification]:
        if not alert.seller_id:
            return None
        return self.add(
            alert.seller_id,
            Notification(
                type=NotificationType.LOW_STOCK,
                title="Low Stock",
                message=f"{alert.product_name} is down to {alert.current_stock} units",
            ),
        )

    def get_notifications(self, recipient_id: str) -> list[Notification]:
        return list(self._inbox.get(recipient_id, []))

    def unread_count(self, recipient_id: str) -> int:
        return sum(1 for n in self._inbox.get(recipient_id, []) if not n.read)

    def mark_as_read(self, recipient_id: str, notification_id: str) -> bool:
        for notification in self._inbox.get(recipient_id, []):
            if notification.id == notification_id:
                notification.read = True
                return True
        return False

    def mark_all_as_read(self, recipient_id: str) -> None:
        for notification in self._inbox.get(recipient_id, []):
            notification.read = True
