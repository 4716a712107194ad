"""
PayHere integration: checksum, checkout form, notification verification
and payment status mapping.
"""
from .hashing import compute_hash, hash_secret
from .credentials import MerchantCredentials, resolve_credentials
from .checkout import CheckoutRequest, build_checkout, format_amount, split_customer_name
from .notification import PaymentNotification, verify_notification, ensure_verified
from .status import PaymentStatus, GatewayStatusCode, map_status_code, check_transition

__all__ = [
    "compute_hash",
    "hash_secret",
    "MerchantCredentials",
    "resolve_credentials",
    "CheckoutRequest",
    "build_checkout",
    "format_amount",
    "split_customer_name",
    "PaymentNotification",
    "verify_notification",
    "ensure_verified",
    "PaymentStatus",
    "GatewayStatusCode",
    "map_status_code",
    "check_transition",
]
