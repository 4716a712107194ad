"""
PayHere checkout form builder.

The browser POSTs the returned form_data to checkout_url; field names are the
gateway's wire contract.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Dict, Optional, Tuple, Union

from .credentials import MerchantCredentials
from .hashing import DEFAULT_ALGORITHM, compute_hash

SANDBOX_CHECKOUT_URL = "https://sandbox.payhere.lk/pay/checkout"
LIVE_CHECKOUT_URL = "https://www.payhere.lk/pay/checkout"

DEFAULT_CURRENCY = "LKR"
DEFAULT_COUNTRY = "Sri Lanka"

FORM_FIELDS = (
    "merchant_id",
    "return_url",
    "cancel_url",
    "notify_url",
    "order_id",
    "items",
    "currency",
    "amount",
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "country",
    "hash",
)

_CENTS = Decimal("0.01")


def format_amount(amount: Union[int, float, Decimal]) -> str:
    """Two decimal places, half-up rounding. The result feeds both hash and form."""
    if isinstance(amount, bool):
        raise ValueError("Amount must be a number")
    if isinstance(amount, float) and not math.isfinite(amount):
        raise ValueError(f"Amount must be finite, got {amount}")
    try:
        # str() first so 10.005 rounds as written rather than as its binary value
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {amount}")
    if value < 0:
        raise ValueError("Amount must not be negative")
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def split_customer_name(name: str) -> Tuple[str, str]:
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


@dataclass(frozen=True)
class CheckoutRequest:
    merchant_id: str
    order_id: str
    amount: str
    currency: str
    hash: str
    checkout_url: str
    form_data: Dict[str, str] = field(default_factory=dict)

    def as_form(self) -> Dict[str, str]:
        return dict(self.form_data)


def callback_urls(base_url: str, order_id: str) -> Dict[str, str]:
    base = base_url.rstrip("/")
    return {
        "return_url": f"{base}/payments/return?booking_id={order_id}",
        "cancel_url": f"{base}/payments/cancel?booking_id={order_id}",
        "notify_url": f"{base}/api/payments/notify",
    }


def build_checkout(
    *,
    order_id: str,
    amount: Union[int, float, Decimal],
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    customer_address: str,
    customer_city: str,
    tour_name: str,
    credentials: MerchantCredentials,
    currency: Optional[str] = None,
    customer_country: Optional[str] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> CheckoutRequest:
    """
    Assemble the checkout form for a booking.

    The amount is formatted once; the same string is hashed and posted, so a
    mismatch between the two cannot occur.
    """
    currency = currency or DEFAULT_CURRENCY
    formatted_amount = format_amount(amount)
    first_name, last_name = split_customer_name(customer_name)

    checksum = compute_hash(
        credentials.merchant_secret,
        [credentials.merchant_id, order_id, formatted_amount, currency],
        algorithm=algorithm,
    )

    form_data = {
        "merchant_id": credentials.merchant_id,
        **callback_urls(credentials.base_url, order_id),
        "order_id": order_id,
        "items": tour_name,
        "currency": currency,
        "amount": formatted_amount,
        "first_name": first_name,
        "last_name": last_name,
        "email": customer_email,
        "phone": customer_phone,
        "address": customer_address,
        "city": customer_city,
        "country": customer_country or DEFAULT_COUNTRY,
        "hash": checksum,
    }

    return CheckoutRequest(
        merchant_id=credentials.merchant_id,
        order_id=order_id,
        amount=formatted_amount,
        currency=currency,
        hash=checksum,
        checkout_url=SANDBOX_CHECKOUT_URL if credentials.sandbox else LIVE_CHECKOUT_URL,
        form_data={name: form_data[name] for name in FORM_FIELDS},
    )
