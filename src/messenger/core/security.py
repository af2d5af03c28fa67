"""Opaque credential helpers."""
from __future__ import annotations

import hashlib
import hmac

# Stored in place of a digest to disable login; never equal to a SHA-256 hex digest.
DISABLED_CREDENTIAL = "!disabled"


def hash_key(user_key: str) -> str:
    """Return a SHA-256 hash of the provided user key."""
    return hashlib.sha256(user_key.encode("utf-8")).hexdigest()


def verify_credential(candidate: str, stored: str) -> bool:
    """Compare a plaintext credential against a stored digest in constant time."""
    if stored == DISABLED_CREDENTIAL:
        return False
    return hmac.compare_digest(hash_key(candidate), stored)
