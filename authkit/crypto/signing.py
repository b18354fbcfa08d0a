"""HMAC-SHA256 signature primitives."""

import base64
import hashlib
import hmac


def compute_signature(secret: bytes, data: bytes) -> str:
    """Standard base64 of HMAC-SHA256(secret, data)."""
    digest = hmac.new(secret, data, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def signatures_match(received: str, expected: str) -> bool:
    """Constant-time comparison of two signature strings."""
    return hmac.compare_digest(received.encode(), expected.encode())
