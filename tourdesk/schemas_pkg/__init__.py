# tourdesk/schemas_pkg/__init__.py

# Payment schemas
from .payments import (
    CheckoutIn,
    CheckoutData,
    CheckoutOut,
    NotifyOut,
)

# Auth schemas
from .auth import (
    LoginRequest,
    RegisterRequest,
    UpdatePasswordRequest,
    UserOut,
    AuthResponse,
)

# Booking schemas
from .bookings import (
    BookingCreate,
    BookingUpdate,
)

# Settings schemas
from .settings import SiteSettings

__all__ = [
    # Payments
    "CheckoutIn",
    "CheckoutData",
    "CheckoutOut",
    "NotifyOut",

    # Auth
    "LoginRequest",
    "RegisterRequest",
    "UpdatePasswordRequest",
    "UserOut",
    "AuthResponse",

    # Bookings
    "BookingCreate",
    "BookingUpdate",

    # Settings
    "SiteSettings",
]
