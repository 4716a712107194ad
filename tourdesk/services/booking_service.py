"""
Bookings and the application of verified payment notifications.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from tourdesk.exceptions import BookingNotFound, InvalidStatusTransition, StoreError
from tourdesk.logging_config import get_logger
from tourdesk.payhere.notification import PaymentNotification, ensure_verified
from tourdesk.payhere.status import (
    PaymentStatus,
    booking_status_for,
    check_transition,
    coerce_status,
)

logger = get_logger(__name__)

BOOKINGS_TABLE = "bookings"

_REF_PATTERN = re.compile(r"^B(\d+)$")

MAX_APPLY_ATTEMPTS = 3


@dataclass(frozen=True)
class PaymentApplication:
    order_id: str
    previous: PaymentStatus
    current: PaymentStatus
    changed: bool
    booking: Dict[str, Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def next_booking_ref(existing_ids: Iterable[str]) -> str:
    """Next reference in the B001, B002, ... sequence."""
    highest = 0
    for booking_id in existing_ids:
        m = _REF_PATTERN.match(str(booking_id or ""))
        if m:
            highest = max(highest, int(m.group(1)))
    return f"B{highest + 1:03d}"


def list_bookings(store) -> List[Dict[str, Any]]:
    return store.select(BOOKINGS_TABLE, order_by="created_at", descending=True)


def get_booking(store, booking_id: str) -> Dict[str, Any]:
    booking = store.get(BOOKINGS_TABLE, booking_id)
    if not booking:
        raise BookingNotFound(booking_id)
    return booking


def create_booking(store, data: Dict[str, Any]) -> Dict[str, Any]:
    existing = [row.get("id") for row in store.select(BOOKINGS_TABLE)]
    now = _now()
    booking = {
        **data,
        "id": next_booking_ref(existing),
        "status": "pending",
        "payment_status": PaymentStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
    }
    created = store.insert(BOOKINGS_TABLE, booking)
    logger.info("booking_created", booking_id=created.get("id"))
    return created


def update_booking(store, booking_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
    get_booking(store, booking_id)
    rows = store.update(BOOKINGS_TABLE, {"id": booking_id}, {**values, "updated_at": _now()})
    if not rows:
        raise BookingNotFound(booking_id)
    return rows[0]


def delete_booking(store, booking_id: str) -> Dict[str, Any]:
    rows = store.delete(BOOKINGS_TABLE, {"id": booking_id})
    if not rows:
        raise BookingNotFound(booking_id)
    logger.info("booking_deleted", booking_id=booking_id)
    return rows[0]


def apply_payment_notification(
    store,
    notification: PaymentNotification,
    secret: str,
) -> PaymentApplication:
    """
    Verify a gateway notification and move the booking's payment status.

    The write is conditional on the payment_status that was read, so when the
    same notification is delivered twice concurrently only one delivery gets
    changed=True. The other re-reads the booking and is treated as a replay.
    Redelivery of an already-applied status writes nothing and returns
    changed=False so callers skip their side effects.

    Raises:
        SignatureMismatch: signature invalid, booking untouched
        BookingNotFound: no booking with the notification's order id
        InvalidStatusTransition: change not allowed by the state machine
        StoreError: the booking kept changing underneath every attempt
    """
    ensure_verified(notification, secret)
    order_id = notification.order_id
    target = notification.payment_status

    for _ in range(MAX_APPLY_ATTEMPTS):
        booking = get_booking(store, order_id)
        stored = booking.get("payment_status")
        previous = coerce_status(stored)

        try:
            changed = check_transition(previous, target)
        except InvalidStatusTransition:
            logger.warning(
                "payment_transition_rejected",
                order_id=order_id,
                current=previous.value,
                target=target.value,
                status_code=notification.status_code,
            )
            raise

        if not changed:
            logger.info("payment_notification_replayed", order_id=order_id, status=target.value)
            return PaymentApplication(order_id, previous, target, False, booking)

        values: Dict[str, Any] = {
            "payment_status": target.value,
            "status": booking_status_for(target),
            "updated_at": _now(),
        }
        if notification.payment_id:
            values["payment_id"] = notification.payment_id
        if notification.method:
            values["payment_method"] = notification.method

        # Only matches while nobody else has moved the status since the read
        rows = store.update(BOOKINGS_TABLE, {"id": order_id, "payment_status": stored}, values)
        if not rows:
            logger.info("payment_status_write_lost_race", order_id=order_id, expected=previous.value)
            continue

        logger.info(
            "payment_status_updated",
            order_id=order_id,
            previous=previous.value,
            current=target.value,
            payment_id=notification.payment_id,
        )
        return PaymentApplication(order_id, previous, target, True, rows[0])

    raise StoreError(f"Booking {order_id} changed during every payment update attempt")
