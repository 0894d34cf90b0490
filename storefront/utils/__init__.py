# Utilities

from .order_id import (
    ORDER_ID_PREFIX,
    ORDER_ID_LENGTH,
    ParsedOrderId,
    generate_unique_order_id,
    is_valid_order_id,
    parse_order_id,
    order_qr_payload,
)
from .upi import UPIPaymentData, generate_upi_url, validate_upi_id, generate_transaction_id

__all__ = [
    "ORDER_ID_PREFIX",
    "ORDER_ID_LENGTH",
    "ParsedOrderId",
    "generate_unique_order_id",
    "is_valid_order_id",
    "parse_order_id",
    "order_qr_payload",
    "UPIPaymentData",
    "generate_upi_url",
    "validate_upi_id",
    "generate_transaction_id",
]
