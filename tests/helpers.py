"""Shared fixtures for the test modules."""
import os
from typing import Dict

from tourdesk.config.settings import Settings
from tourdesk.payhere.hashing import compute_hash

MERCHANT_ID = "1221149"
MERCHANT_SECRET = "mySecret"

# Settings overrides for a merchant configured through the environment
PAYHERE_ENV = {
    "PAYHERE_MERCHANT_ID": MERCHANT_ID,
    "PAYHERE_MERCHANT_SECRET": MERCHANT_SECRET,
    "PAYHERE_SANDBOX": "true",
    "NEXT_PUBLIC_BASE_URL": "https://tours.example.lk",
}


def make_settings(data_dir: str, **overrides) -> Settings:
    values = dict(
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
        SUPABASE_URL=None,
        SUPABASE_SERVICE_ROLE_KEY=None,
        DATA_DIR=data_dir,
        SETTINGS_FILE=os.path.join(data_dir, "site_settings.json"),
        SESSION_SECRET="test-session-secret",
        SENDGRID_API_KEY=None,
        SENDGRID_FROM_EMAIL=None,
        ADMIN_EMAILS=[],
        MIGRATION_MODE_UNTIL=None,
        TRUSTED_PROXIES=[],
        PAYHERE_MERCHANT_ID=None,
        PAYHERE_MERCHANT_SECRET=None,
        PAYHERE_SANDBOX=None,
        NEXT_PUBLIC_BASE_URL=None,
    )
    values.update(overrides)
    return Settings(**values)


def make_app(settings: Settings, store):
    from tourdesk.main import create_app

    return create_app(settings=settings, store=store)


def notification_form(
    order_id: str,
    status_code: str,
    amount: str = "2500.00",
    currency: str = "LKR",
    merchant_id: str = MERCHANT_ID,
    secret: str = MERCHANT_SECRET,
    **extra,
) -> Dict[str, str]:
    """Form body the gateway would POST, signed with `secret`."""
    form = {
        "merchant_id": merchant_id,
        "order_id": order_id,
        "payhere_amount": amount,
        "payhere_currency": currency,
        "status_code": status_code,
        "md5sig": compute_hash(secret, [merchant_id, order_id, amount, currency, status_code]),
    }
    form.update(extra)
    return form
