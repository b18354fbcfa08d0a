"""RS256 JWT validation against a JWKS-backed key set."""

import json
import logging
import math
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import jwt
import pydantic

from authkit.core.errors import (
    AudienceMismatchError,
    MalformedExpiryError,
    TokenAlgorithmError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureError,
)
from authkit.crypto.types import SigningKey, SigningKeySet
from authkit.oidc.types import Claims, TokenClaims

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"

ClaimsT = TypeVar("ClaimsT", bound=Claims)
KeySetProvider = Callable[[], SigningKeySet]

_jws = jwt.PyJWS()


def _candidate_keys(header: dict[str, Any], key_set: SigningKeySet) -> list[SigningKey]:
    kid = header.get("kid")
    if not kid:
        return list(key_set.keys)
    key = key_set.find(kid)
    if key is None:
        raise TokenSignatureError(f"no trusted key with kid {kid!r}")
    return [key]


def _verify_signature(token: str, key_set: SigningKeySet) -> bytes:
    """Return the payload bytes of the first key that verifies the token."""
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as exc:
        raise TokenMalformedError(str(exc)) from exc
    alg = header.get("alg")
    if alg != ALGORITHM:
        raise TokenAlgorithmError(f"unsupported signing algorithm: {alg}")

    for key in _candidate_keys(header, key_set):
        try:
            decoded = _jws.decode_complete(
                token, key=key.public_key, algorithms=[ALGORITHM]
            )
        except jwt.InvalidSignatureError:
            continue
        except jwt.InvalidAlgorithmError as exc:
            raise TokenAlgorithmError(str(exc)) from exc
        except jwt.DecodeError as exc:
            raise TokenMalformedError(str(exc)) from exc
        return decoded["payload"]
    raise TokenSignatureError("signature verification failed")


def _decode_payload(payload: bytes) -> dict[str, Any]:
    try:
        raw = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TokenMalformedError("token payload is not valid JSON") from exc
    if not isinstance(raw, dict):
        raise TokenMalformedError("token payload is not a JSON object")
    return raw


def check_expiry(raw: dict[str, Any], now: float | None = None) -> None:
    """Enforce ``exp`` when present; absent ``exp`` is accepted."""
    if "exp" not in raw:
        return
    exp = raw["exp"]
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        raise MalformedExpiryError("invalid exp claim format")
    if isinstance(exp, float) and not math.isfinite(exp):
        raise MalformedExpiryError("invalid exp claim format")
    current = int(time.time() if now is None else now)
    if current >= int(exp):
        raise TokenExpiredError("token has expired")


def validate_token(
    token: str,
    key_set_provider: KeySetProvider,
    claims_type: type[ClaimsT],
    now: float | None = None,
) -> ClaimsT:
    """Verify ``token`` and return its claims projected into ``claims_type``.

    Raises a distinct :class:`~authkit.core.errors.TokenValidationError`
    subclass for malformed input, wrong algorithm, bad signature, malformed
    expiry and expiry.
    """
    key_set = key_set_provider()
    payload = _verify_signature(token, key_set)
    raw = _decode_payload(payload)
    check_expiry(raw, now)
    try:
        return claims_type.from_payload(raw)
    except pydantic.ValidationError as exc:
        raise TokenMalformedError(
            f"claims do not match {claims_type.__name__}"
        ) from exc


def check_audience(claims: TokenClaims, expected: Iterable[str]) -> None:
    """Require that ``aud`` shares at least one value with ``expected``.

    An empty ``expected`` imposes no constraint.
    """
    wanted = set(expected)
    if not wanted:
        return
    if wanted.isdisjoint(claims.aud):
        logger.debug("audience mismatch: token aud=%s", claims.aud)
        raise AudienceMismatchError(
            "none of the expected audiences found in token aud claim"
        )
