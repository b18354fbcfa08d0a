"""PKCE code verifier and S256 challenge generation (RFC 7636)."""

import hashlib
import secrets
from base64 import urlsafe_b64encode

from authkit.core.errors import ValidationError
from authkit.oidc.types import PKCEConfiguration, PKCEOptions

CODE_CHALLENGE_METHOD_S256 = "S256"
DEFAULT_VERIFIER_LENGTH = 64
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
VERIFIER_CHARSET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
)

_LENGTH_MESSAGE = (
    f"code verifier length must be between {MIN_VERIFIER_LENGTH} "
    f"and {MAX_VERIFIER_LENGTH}"
)


def normalize_code_challenge_method(method: str) -> str:
    """Resolve the challenge method; empty means S256."""
    if not method or method.upper() == CODE_CHALLENGE_METHOD_S256:
        return CODE_CHALLENGE_METHOD_S256
    raise ValidationError(
        f"unsupported code challenge method: {method} (only S256 is supported)"
    )


def validate_code_verifier(verifier: str) -> None:
    """Reject verifiers outside 43..128 chars or the unreserved charset."""
    if not MIN_VERIFIER_LENGTH <= len(verifier) <= MAX_VERIFIER_LENGTH:
        raise ValidationError(_LENGTH_MESSAGE)
    if any(ch not in VERIFIER_CHARSET for ch in verifier):
        raise ValidationError(
            "code verifier must contain only unreserved URI characters "
            "[A-Z a-z 0-9 - . _ ~]"
        )


def generate_code_verifier(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Generate a random verifier of ``length`` unreserved characters."""
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        raise ValidationError(_LENGTH_MESSAGE)
    charset_size = len(VERIFIER_CHARSET)
    return "".join(
        VERIFIER_CHARSET[b % charset_size] for b in secrets.token_bytes(length)
    )


def compute_code_challenge(verifier: str) -> str:
    """S256 challenge: unpadded base64url of SHA256(verifier)."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify_pkce(code_verifier: str, code_challenge: str) -> bool:
    """Verify S256 PKCE: SHA256(verifier) == challenge."""
    try:
        computed = compute_code_challenge(code_verifier)
    except UnicodeEncodeError:
        return False
    return secrets.compare_digest(computed, code_challenge)


def generate_pkce_configuration(
    options: PKCEOptions | None = None,
) -> PKCEConfiguration:
    """Produce a verifier and its matching challenge.

    A supplied ``code_verifier`` is validated and used verbatim; otherwise one
    of ``verifier_length`` characters (default 64) is generated.
    """
    options = options or PKCEOptions()
    method = normalize_code_challenge_method(options.code_challenge_method)

    if options.code_verifier:
        validate_code_verifier(options.code_verifier)
        verifier = options.code_verifier
    else:
        verifier = generate_code_verifier(
            options.verifier_length or DEFAULT_VERIFIER_LENGTH
        )

    return PKCEConfiguration(
        code_verifier=verifier,
        code_challenge=compute_code_challenge(verifier),
        code_challenge_method=method,
    )
