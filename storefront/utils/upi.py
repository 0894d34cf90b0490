"""UPI payment payloads"""

import random
import re
import string
import time
from dataclasses import dataclass
from urllib.parse import quote

UPI_ID_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+$")


@dataclass
class UPIPaymentData:
    upi_id: str
    amount: float
    transaction_note: str
    merchant_name: str
    currency: str = "INR"


def generate_upi_url(data: UPIPaymentData) -> str:
    """
    Build the upi://pay URL a payer's app scans.

    Format: upi://pay?pa=UPI_ID&pn=NAME&am=AMOUNT&tn=NOTE&cu=INR
    """
    return (
        f"upi://pay?pa={quote(data.upi_id, safe='')}"
        f"&pn={quote(data.merchant_name, safe='')}"
        f"&am={_format_amount(data.amount)}"
        f"&tn={quote(data.transaction_note, safe='')}"
        f"&cu={data.currency}"
    )


def _format_amount(amount: float) -> str:
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def validate_upi_id(upi_id: str) -> bool:
    """user@bank style handle"""
    return bool(upi_id) and UPI_ID_PATTERN.match(upi_id) is not None


def generate_transaction_id() -> str:
    millis = str(int(time.time() * 1000))
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"UPI{millis[-6:]}{suffix}"
