"""Verification of HMAC-signed webhook and interceptor payloads."""

import base64
import re
import time
from collections.abc import Mapping

import uuid_utils

from authkit.core.errors import (
    InvalidSecretError,
    InvalidSignatureError,
    InvalidTimestampError,
    MissingHeadersError,
    TimestampTooNewError,
    TimestampTooOldError,
)
from authkit.crypto.signing import compute_signature, signatures_match

HEADER_ID = "webhook-id"
HEADER_TIMESTAMP = "webhook-timestamp"
HEADER_SIGNATURE = "webhook-signature"

SIGNATURE_VERSION = "v1"
TOLERANCE_SECONDS = 5 * 60

_TIMESTAMP_PATTERN = re.compile(r"[+-]?[0-9]+")


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
        return ""
    return value


def decode_secret(secret: str) -> bytes:
    """Decode the key material of a ``prefix_base64key`` secret."""
    parts = secret.split("_", 1)
    if len(parts) < 2:
        raise InvalidSecretError("Invalid secret")
    return base64.b64decode(parts[1], validate=True)


def verify_timestamp(value: str, now: float | None = None) -> int:
    """Parse a Unix timestamp and enforce the tolerance window."""
    if not _TIMESTAMP_PATTERN.fullmatch(value):
        raise InvalidTimestampError(f"invalid timestamp: {value!r}")
    timestamp = int(value)
    current = int(time.time() if now is None else now)
    if current - timestamp > TOLERANCE_SECONDS:
        raise TimestampTooOldError("Message timestamp too old")
    if timestamp > current + TOLERANCE_SECONDS:
        raise TimestampTooNewError("Message timestamp too new")
    return timestamp


def _signed_content(msg_id: str, timestamp: int, payload: bytes) -> bytes:
    return f"{msg_id}.{timestamp}.".encode() + payload


def verify_payload_signature(
    secret: str,
    headers: Mapping[str, str],
    payload: bytes,
    now: float | None = None,
) -> bool:
    """Return True when any ``v1`` signature matches; raise otherwise."""
    msg_id = _header(headers, HEADER_ID)
    raw_timestamp = _header(headers, HEADER_TIMESTAMP)
    raw_signatures = _header(headers, HEADER_SIGNATURE)
    if not msg_id or not raw_timestamp or not raw_signatures:
        raise MissingHeadersError("Missing required headers")

    key = decode_secret(secret)
    timestamp = verify_timestamp(raw_timestamp, now)
    expected = compute_signature(key, _signed_content(msg_id, timestamp, payload))

    for versioned in raw_signatures.split(" "):
        version, sep, signature = versioned.partition(",")
        if not sep or version != SIGNATURE_VERSION:
            continue
        if signatures_match(signature, expected):
            return True
    raise InvalidSignatureError("Invalid signature")


def verify_webhook_payload(
    secret: str,
    headers: Mapping[str, str],
    payload: bytes,
    now: float | None = None,
) -> bool:
    """Verify an asynchronously delivered webhook."""
    return verify_payload_signature(secret, headers, payload, now)


def verify_interceptor_payload(
    secret: str,
    headers: Mapping[str, str],
    payload: bytes,
    now: float | None = None,
) -> bool:
    """Verify a synchronous interceptor request body."""
    return verify_payload_signature(secret, headers, payload, now)


def sign_payload(
    secret: str,
    payload: bytes,
    msg_id: str | None = None,
    timestamp: int | None = None,
) -> dict[str, str]:
    """Produce the three signature headers for ``payload``.

    Useful for exercising webhook consumers locally.
    """
    key = decode_secret(secret)
    msg_id = msg_id or f"msg_{uuid_utils.uuid7()}"
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = compute_signature(key, _signed_content(msg_id, timestamp, payload))
    return {
        HEADER_ID: msg_id,
        HEADER_TIMESTAMP: str(timestamp),
        HEADER_SIGNATURE: f"{SIGNATURE_VERSION},{signature}",
    }
