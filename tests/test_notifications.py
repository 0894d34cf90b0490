# tests/test_notifications.py
from storefront.models.stock import LowStockAlert
from storefront.services.notifications import (
    Notification,
    NotificationCenter,
    NotificationType,
)

from .test_orders import make_order


def test_new_order_goes_to_seller(notifications):
    notification = notifications.notify_new_order(make_order(total_amount=18500.0))

    assert notification.type == NotificationType.NEW_ORDER
    assert notification.message == "Order AGRI18102026521030ABCD from Ramesh Patel - ₹18500.00"
    assert notifications.get_notifications("seller-001") == [notification]
    assert notifications.unread_count("seller-001") == 1


def test_low_stock_without_seller_is_ignored(notifications):
    alert = LowStockAlert(product_id="p1", product_name="Urea", current_stock=3, threshold=5)

    assert notifications.notify_low_stock(alert) is None
    assert notifications.notify_low_stock(alert.model_copy(update={"seller_id": "s1"})) is not None
    assert notifications.unread_count("s1") == 1


def test_newest_first_and_capped():
    center = NotificationCenter(max_per_recipient=3)
    for i in range(5):
        center.add("s1", Notification(type=NotificationType.ORDER_UPDATE, title=str(i), message=""))

    assert [n.title for n in center.get_notifications("s1")] == ["4", "3", "2"]


def test_mark_read(notifications):
    first = notifications.notify_new_order(make_order())
    notifications.notify_new_order(make_order(order_id="AGRI18102026521031WXYZ"))

    assert notifications.mark_as_read("seller-001", first.id)
    assert not notifications.mark_as_read("seller-001", "missing")
    assert notifications.unread_count("seller-001") == 1

    notifications.mark_all_as_read("seller-001")
    assert notifications.unread_count("seller-001") == 0
