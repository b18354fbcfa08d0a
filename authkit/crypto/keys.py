"""JWK to RSA public key conversion."""

import base64
import logging

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicNumbers

from authkit.crypto.types import JWKEntry, JWKSDocument, SigningKey, SigningKeySet

logger = logging.getLogger(__name__)


def _base64url_to_int(value: str) -> int:
    """Decode an unpadded base64url string as a big-endian integer."""
    padded = value + "=" * (-len(value) % 4)
    raw = base64.urlsafe_b64decode(padded)
    return int.from_bytes(raw, byteorder="big")


def jwk_to_signing_key(entry: JWKEntry) -> SigningKey:
    """Load the RSA public key described by a JWK entry."""
    if entry.kty != "RSA":
        raise ValueError(f"unsupported key type: {entry.kty}")
    if not entry.n or not entry.e:
        raise ValueError(f"RSA key {entry.kid!r} is missing n or e")
    numbers = RSAPublicNumbers(
        e=_base64url_to_int(entry.e),
        n=_base64url_to_int(entry.n),
    )
    return SigningKey(kid=entry.kid, alg=entry.alg, public_key=numbers.public_key())


def load_key_set(document: object) -> SigningKeySet:
    """Parse a JWKS document, keeping RSA signature keys only."""
    parsed = JWKSDocument.model_validate(document)
    keys = []
    for entry in parsed.keys:
        if entry.kty != "RSA" or entry.use != "sig":
            logger.debug(
                "skipping JWK %s (kty=%s use=%s)", entry.kid, entry.kty, entry.use
            )
            continue
        keys.append(jwk_to_signing_key(entry))
    return SigningKeySet(keys=tuple(keys))
