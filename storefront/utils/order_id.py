"""
Order identifiers

Layout (22 characters, printed on labels and encoded in the order's
scannable code):

    AGRI DD MM YYYY PP HH mm XXXX

PP is the last two digits of the destination PIN code and XXXX four
random uppercase letters or digits.
"""

import random
import re
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ORDER_ID_PREFIX = "AGRI"
ORDER_ID_LENGTH = 22

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

ORDER_ID_PATTERN = re.compile(
    rf"^(?P<prefix>{ORDER_ID_PREFIX})"
    r"(?P<day>\d{2})(?P<month>\d{2})(?P<year>\d{4})"
    r"(?P<pincode_last_two>\d{2})"
    r"(?P<hour>\d{2})(?P<minute>\d{2})"
    r"(?P<suffix>[A-Z0-9]{4})$"
)


@dataclass(frozen=True)
class ParsedOrderId:
    prefix: str
    day: str
    month: str
    year: str
    pincode_last_two: str
    hour: str
    minute: str
    suffix: str
    timestamp: datetime


def generate_unique_order_id(pincode: str, now: Optional[datetime] = None) -> str:
    """Build an order identifier for an order shipping to pincode"""
    now = now or datetime.now()
    digits = "".join(ch for ch in pincode if ch.isdigit())
    pincode_last_two = digits[-2:].rjust(2, "0")
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=4))
    return f"{ORDER_ID_PREFIX}{now:%d%m%Y}{pincode_last_two}{now:%H%M}{suffix}"


def is_valid_order_id(order_id: str) -> bool:
    """Shape check only; the date is not verified"""
    return bool(order_id) and ORDER_ID_PATTERN.match(order_id) is not None


def parse_order_id(order_id: str) -> Optional[ParsedOrderId]:
    """Split an order identifier into its fields, or None if it is malformed"""
    match = ORDER_ID_PATTERN.match(order_id or "")
    if not match:
        return None

    parts = match.groupdict()
    try:
        timestamp = datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"]),
            int(parts["minute"]),
        )
    except ValueError:
        return None

    return ParsedOrderId(timestamp=timestamp, **parts)


def order_qr_payload(order_id: str) -> str:
    """Content of the order's scannable code (rendering happens client side)"""
    return order_id
