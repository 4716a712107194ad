"""
Domain exceptions for the booking and payment backend.

Routers translate these into HTTP responses; services and the PayHere
helpers raise them and never return HTTP details themselves.
"""
from typing import Optional


class TourdeskError(Exception):
    """Base class for all application errors."""


class ConfigurationError(TourdeskError):
    """A required setting is missing from every configured source."""

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = missing or []


class SignatureMismatch(TourdeskError):
    """An inbound payment notification failed signature verification."""

    def __init__(self, order_id: str):
        super().__init__(f"Invalid payment notification signature for order {order_id}")
        self.order_id = order_id


class InvalidStatusTransition(TourdeskError):
    """A payment status change outside the allowed state machine."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Payment status cannot move from '{current}' to '{target}'")
        self.current = current
        self.target = target


class BookingNotFound(TourdeskError):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class StoreError(TourdeskError):
    """The record store (Supabase or the JSON fallback) failed."""
