"""
PayHere status codes and the booking payment state machine.

    pending -> paid       (success)
    pending -> failed     (cancelled / failed)
    paid    -> refunded   (chargeback)

Re-applying the current status is a no-op so redelivered notifications are safe.
"""
from enum import Enum
from typing import Optional

from tourdesk.exceptions import InvalidStatusTransition


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class GatewayStatusCode(str, Enum):
    SUCCESS = "2"
    PENDING = "0"
    CANCELLED = "-1"
    FAILED = "-2"
    CHARGEBACK = "-3"


_STATUS_MAP = {
    GatewayStatusCode.SUCCESS.value: PaymentStatus.PAID,
    GatewayStatusCode.PENDING.value: PaymentStatus.PENDING,
    GatewayStatusCode.CANCELLED.value: PaymentStatus.FAILED,
    GatewayStatusCode.FAILED.value: PaymentStatus.FAILED,
    GatewayStatusCode.CHARGEBACK.value: PaymentStatus.REFUNDED,
}

ALLOWED_TRANSITIONS = frozenset({
    (PaymentStatus.PENDING, PaymentStatus.PAID),
    (PaymentStatus.PENDING, PaymentStatus.FAILED),
    (PaymentStatus.PAID, PaymentStatus.REFUNDED),
})

# booking.status written alongside each payment status
_BOOKING_STATUS = {
    PaymentStatus.PAID: "confirmed",
    PaymentStatus.PENDING: "pending",
    PaymentStatus.FAILED: "pending",
    PaymentStatus.REFUNDED: "cancelled",
}


def map_status_code(status_code: Optional[str]) -> PaymentStatus:
    """Codes are matched exactly; unknown, padded or missing codes map to pending."""
    if status_code is None:
        return PaymentStatus.PENDING
    return _STATUS_MAP.get(str(status_code), PaymentStatus.PENDING)


def coerce_status(value: Optional[str]) -> PaymentStatus:
    """Read a stored payment_status; rows written before the column existed count as pending."""
    if not value:
        return PaymentStatus.PENDING
    return PaymentStatus(value)


def check_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    """
    Validate a status change.

    Returns:
        True if the status must be written, False if it is already current

    Raises:
        InvalidStatusTransition: the change is not part of the state machine
    """
    if current == target:
        return False
    if (current, target) not in ALLOWED_TRANSITIONS:
        raise InvalidStatusTransition(current.value, target.value)
    return True


def booking_status_for(status: PaymentStatus) -> str:
    return _BOOKING_STATUS[status]
