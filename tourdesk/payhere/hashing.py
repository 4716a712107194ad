"""
PayHere checksum primitive.

    hash = H(field_1 + field_2 + ... + field_n + H(secret).upper()).upper()

The gateway recomputes the same value server-side, so field order, amount
formatting and casing must match exactly.
"""
import hashlib
from typing import Iterable

DEFAULT_ALGORITHM = "md5"


def _hex_upper(data: str, algorithm: str) -> str:
    digest = hashlib.new(algorithm)
    digest.update(data.encode("utf-8"))
    return digest.hexdigest().upper()


def hash_secret(secret: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Digest of the merchant secret alone, uppercase hex."""
    if not secret:
        raise ValueError("Merchant secret must not be empty")
    return _hex_upper(secret, algorithm)


def compute_hash(secret: str, fields: Iterable[str], algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute the keyed checksum over an ordered list of plaintext fields.

    Args:
        secret: Merchant secret (never transmitted, only digested)
        fields: Plaintext fields in the exact order the gateway expects
        algorithm: Any name accepted by hashlib.new (legacy gateway uses md5)

    Returns:
        Uppercase hexadecimal digest
    """
    payload = "".join(str(f) for f in fields) + hash_secret(secret, algorithm)
    return _hex_upper(payload, algorithm)
