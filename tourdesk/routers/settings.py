"""
Admin settings page.

Settings are stored as the "main" row of the settings table and mirrored to
the JSON settings file so the credential cascade still finds them when the
record store is unreachable. The merchant secret is never returned.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from tourdesk.config.settings import Settings
from tourdesk.config.sources import SETTINGS_ROW_ID, SETTINGS_TABLE, FileSettingsSource
from tourdesk.deps import client_ip, get_settings, get_store, require_admin
from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger
from tourdesk.schemas_pkg.settings import SiteSettings
from tourdesk.services.audit_service import log_audit
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

router = APIRouter(tags=["Settings"])


def _current(store: RecordStore, settings_file: FileSettingsSource) -> SiteSettings:
    try:
        row = store.get(SETTINGS_TABLE, SETTINGS_ROW_ID)
    except StoreError as e:
        logger.warning("settings_record_unavailable", error=str(e))
        row = None
    if row:
        return SiteSettings.model_validate({k: v for k, v in row.items() if v is not None})
    return SiteSettings.model_validate(settings_file.load())


def _public(site: SiteSettings) -> Dict[str, Any]:
    data = site.model_dump(by_alias=True, exclude={"payhere_merchant_secret"})
    data["payhereMerchantSecretSet"] = bool(site.payhere_merchant_secret)
    return data


@router.get("")
def get_site_settings(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(require_admin),
):
    site = _current(store, FileSettingsSource(settings.SETTINGS_FILE))
    return {"success": True, "data": _public(site)}


@router.put("")
def update_site_settings(
    body: SiteSettings,
    request: Request,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(require_admin),
):
    settings_file = FileSettingsSource(settings.SETTINGS_FILE)
    existing = _current(store, settings_file)

    # An empty secret on the form means "unchanged"
    if not body.payhere_merchant_secret:
        body = body.model_copy(update={"payhere_merchant_secret": existing.payhere_merchant_secret})

    row = {"id": SETTINGS_ROW_ID, **body.model_dump()}
    try:
        store.upsert(SETTINGS_TABLE, [row])
    except StoreError as e:
        logger.error("settings_save_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Could not save settings")

    try:
        settings_file.save(body.model_dump(by_alias=True))
    except OSError as e:
        logger.warning("settings_file_mirror_failed", path=str(settings_file.path), error=str(e))

    request.app.state.payhere_credentials = None

    log_audit(
        store,
        action="settings_updated",
        resource_type="settings",
        resource_id=SETTINGS_ROW_ID,
        user_id=current_user.get("sub"),
        changes={
            "payhereMerchantId": body.payhere_merchant_id,
            "payhereSandbox": body.payhere_sandbox,
            "payhereBaseUrl": body.payhere_base_url,
            "payhereMerchantSecretChanged": body.payhere_merchant_secret != existing.payhere_merchant_secret,
        },
        ip_address=client_ip(request),
    )
    return {"success": True, "data": _public(body)}
