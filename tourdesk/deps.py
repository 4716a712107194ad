from typing import Any, Dict, List

from fastapi import Depends, HTTPException, Request, status

from .config.settings import Settings
from .config.sources import SettingsChain, default_chain, payhere_env
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .payhere.credentials import MerchantCredentials, resolve_credentials
from .security import decode_session_token
from .services.rate_limit import RateLimitStore
from .storage import RecordStore, get_record_store

logger = get_logger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request, settings: Settings = Depends(get_settings)) -> RecordStore:
    if request.app.state.store is None:
        request.app.state.store = get_record_store(settings)
    return request.app.state.store


def get_settings_chain(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SettingsChain:
    return default_chain(store, settings.SETTINGS_FILE, environ=payhere_env(settings))


def get_payhere_credentials(
    request: Request,
    chain: SettingsChain = Depends(get_settings_chain),
) -> MerchantCredentials:
    """
    Merchant credentials, resolved once and kept on app.state until the
    settings page changes them.

    Raises:
        HTTPException 500 when no source configures the merchant id and secret
    """
    cached = request.app.state.payhere_credentials
    if cached is not None:
        return cached
    try:
        credentials = resolve_credentials(chain)
    except ConfigurationError as e:
        logger.error("payhere_not_configured", missing=e.missing)
        raise HTTPException(status_code=500, detail=str(e))
    request.app.state.payhere_credentials = credentials
    return credentials


def get_login_limiter(request: Request) -> RateLimitStore:
    return request.app.state.login_limiter


def client_ip(request: Request) -> str:
    """
    Address of the caller. X-Forwarded-For is only honoured when the direct
    peer is a configured proxy; the header is then read from the right and the
    first hop that is not itself a trusted proxy is the client.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = set(request.app.state.settings.TRUSTED_PROXIES)
    if peer not in trusted:
        return peer
    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """
    Dependency to get the current user from the signed session cookie.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    payload = decode_session_token(token, settings.SESSION_SECRET, settings.SESSION_ALGORITHM)
    if not payload or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    request.state.user = payload
    return payload


def require_roles(allowed_roles: List[str]):
    """
    Dependency factory to require specific roles.

    Usage:
        @router.get("/admin")
        def admin_route(user: dict = Depends(require_roles(["admin"]))):
            ...
    """
    def role_checker(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required roles: {allowed_roles}",
            )
        return current_user
    return role_checker


require_admin = require_roles(["admin", "staff"])
