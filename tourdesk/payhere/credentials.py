from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tourdesk.exceptions import ConfigurationError

if TYPE_CHECKING:
    from tourdesk.config.sources import SettingsChain

DEFAULT_BASE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class MerchantCredentials:
    merchant_id: str
    merchant_secret: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    sandbox: bool = False


def parse_flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def resolve_credentials(chain: "SettingsChain") -> MerchantCredentials:
    """
    Resolve PayHere credentials through the configuration cascade.

    Raises:
        ConfigurationError: merchant id or secret missing from every source
    """
    merchant_id = chain.get("merchantId")
    merchant_secret = chain.get("merchantSecret")

    missing = [k for k, v in (("merchantId", merchant_id), ("merchantSecret", merchant_secret)) if not v]
    if missing:
        raise ConfigurationError(
            "PayHere credentials not configured. Set them in Settings > Payments "
            "or in the environment.",
            missing=missing,
        )

    sandbox = chain.get("sandboxFlag")
    return MerchantCredentials(
        merchant_id=merchant_id,
        merchant_secret=merchant_secret,
        base_url=(chain.get("baseUrl") or DEFAULT_BASE_URL).rstrip("/"),
        sandbox=parse_flag(sandbox) if sandbox is not None else False,
    )
