"""
Password hashing and signed session cookies.

Credential records carry a password_scheme column. Rows written by the
original site have no scheme and hold an unsalted SHA-256 hex digest; they
still verify so existing users can sign in, and are re-hashed with bcrypt on
their next successful login.
"""
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

import bcrypt
from jose import jwt, JWTError

SCHEME_BCRYPT = "bcrypt"
SCHEME_LEGACY_SHA256 = "sha256"


def hash_password(password: str) -> str:
    """
    Hash a plain password using bcrypt.
    Bcrypt limits passwords to 72 bytes, so we handle that constraint.
    """
    password_bytes = password.encode('utf-8')
    # bcrypt limits to 72 bytes
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a bcrypt hash."""
    if not hashed_password:  # Handle None case
        return False

    password_bytes = plain_password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        return False


def legacy_hash_password(password: str) -> str:
    """Unsalted SHA-256 hex digest used by credentials created before bcrypt."""
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


def credential_scheme(record: Mapping[str, Any]) -> str:
    return record.get("password_scheme") or SCHEME_LEGACY_SHA256


def verify_credential(plain_password: str, record: Mapping[str, Any]) -> bool:
    """Verify a password against a user row according to its password_scheme."""
    stored = record.get("password_hash")
    if not stored:
        return False
    if credential_scheme(record) == SCHEME_BCRYPT:
        return verify_password(plain_password, stored)
    return hmac.compare_digest(legacy_hash_password(plain_password), stored)


def needs_rehash(record: Mapping[str, Any]) -> bool:
    return credential_scheme(record) != SCHEME_BCRYPT


def new_credential(password: str) -> Dict[str, str]:
    """Columns to store for a freshly set password."""
    return {"password_hash": hash_password(password), "password_scheme": SCHEME_BCRYPT}


def create_session_token(
    data: Dict[str, Any],
    secret: str,
    max_age_seconds: int,
    algorithm: str = "HS256",
) -> str:
    """Create the signed value stored in the session cookie."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + timedelta(seconds=max_age_seconds), "type": "session"})
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[Dict[str, Any]]:
    """
    Decode and verify a session token.

    Returns:
        Decoded token payload or None if invalid or expired
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None
    if payload.get("type") != "session":
        return None
    return payload
