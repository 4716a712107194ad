"""
Verification of PayHere asynchronous payment notifications.

    md5sig = H(merchant_id + order_id + payhere_amount + payhere_currency
               + status_code + H(secret).upper()).upper()

The amount is hashed exactly as the gateway sent it, never reformatted.
"""
from __future__ import annotations

import hmac
from typing import Optional

from pydantic import BaseModel, ConfigDict

from tourdesk.exceptions import SignatureMismatch
from .hashing import DEFAULT_ALGORITHM, compute_hash
from .status import PaymentStatus, map_status_code


class PaymentNotification(BaseModel):
    """Inbound notification; untrusted until verified."""

    model_config = ConfigDict(frozen=True)

    merchant_id: str
    order_id: str
    payhere_amount: str
    payhere_currency: str
    status_code: str
    md5sig: str
    payment_id: Optional[str] = None
    method: Optional[str] = None
    status_message: Optional[str] = None

    @property
    def payment_status(self) -> PaymentStatus:
        return map_status_code(self.status_code)


def verify_notification(
    merchant_id: str,
    order_id: str,
    amount: str,
    currency: str,
    status_code: str,
    received_signature: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> bool:
    """Recompute the checksum and compare it case-insensitively with the received one."""
    if not received_signature:
        return False
    expected = compute_hash(
        secret,
        [merchant_id, order_id, amount, currency, status_code],
        algorithm=algorithm,
    )
    return hmac.compare_digest(
        expected.encode("utf-8"),
        received_signature.upper().encode("utf-8"),
    )


def is_authentic(notification: PaymentNotification, secret: str) -> bool:
    return verify_notification(
        notification.merchant_id,
        notification.order_id,
        notification.payhere_amount,
        notification.payhere_currency,
        notification.status_code,
        notification.md5sig,
        secret,
    )


def ensure_verified(notification: PaymentNotification, secret: str) -> PaymentNotification:
    """Raise SignatureMismatch unless the notification is authentic."""
    if not is_authentic(notification, secret):
        raise SignatureMismatch(notification.order_id)
    return notification
