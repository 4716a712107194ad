import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

from tourdesk.logging_config import get_logger
from tourdesk.security import needs_rehash, new_credential, verify_credential, credential_scheme
from tourdesk.services.audit_service import log_audit

logger = get_logger(__name__)

USERS_TABLE = "users"
MIN_PASSWORD_LENGTH = 6
ADMIN_ROLES = ("admin", "staff")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to return to the browser."""
    return {
        "id": user.get("id"),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role") or "customer",
    }


def find_user(store, email: str) -> Optional[Dict[str, Any]]:
    rows = store.select(USERS_TABLE, {"email": normalize_email(email)}, limit=1)
    return rows[0] if rows else None


def migration_mode_active(until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Password-less logins are only honoured before the configured cutoff."""
    if until is None:
        return False
    if until.tzinfo is None:
        until = until.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now < until


# ===============================
# LOGIN
# ===============================
def authenticate(
    store,
    email: str,
    password: str,
    migration_until: Optional[datetime] = None,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Validate credentials and return the user row.
    """
    user = find_user(store, email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.get("status", "active") != "active":
        raise HTTPException(status_code=403, detail="Account is inactive. Please contact administrator.")

    updates: Dict[str, Any] = {}

    if not user.get("password_hash"):
        if not migration_mode_active(migration_until, now):
            logger.warning("login_without_password_hash_refused", user_id=user.get("id"))
            raise HTTPException(status_code=401, detail="Invalid email or password")
        log_audit(
            store,
            action="login_migration_mode",
            resource_type="user",
            resource_id=user.get("id"),
            user_id=user.get("id"),
            changes={"migration_mode_until": migration_until.isoformat()},
            ip_address=ip_address,
        )
    else:
        if not verify_credential(password, user):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        if needs_rehash(user):
            updates.update(new_credential(password))
            logger.info("password_rehashed", user_id=user.get("id"), previous_scheme=credential_scheme(user))

    updates["last_login"] = (now or datetime.now(timezone.utc)).isoformat()
    store.update(USERS_TABLE, {"id": user["id"]}, updates)
    return user


# ===============================
# REGISTER
# ===============================
def register_user(store, name: str, email: str, password: str) -> Dict[str, Any]:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    if find_user(store, email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = {
        "id": str(uuid.uuid4()),
        "name": name.strip(),
        "email": normalize_email(email),
        "phone": "",
        "role": "customer",
        "status": "active",
        **new_credential(password),
        "total_bookings": 0,
        "total_spent": 0,
        "address": "",
        "notes": "",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    created = store.insert(USERS_TABLE, user)
    logger.info("user_registered", user_id=created.get("id"))
    return created


# ===============================
# PASSWORD RESET (ADMIN)
# ===============================
def update_password(store, email: str, password: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    user = find_user(store, email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    store.update(USERS_TABLE, {"id": user["id"]}, new_credential(password))
    log_audit(
        store,
        action="password_updated",
        resource_type="user",
        resource_id=user["id"],
        user_id=actor_id,
    )
    return user
