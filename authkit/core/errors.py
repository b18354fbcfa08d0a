"""Exception taxonomy for authkit.

Transport failures are not wrapped: they surface as the ``httpx`` exceptions
raised by the underlying client.
"""


class AuthKitError(Exception):
    """Base class for every error raised by authkit."""


class ValidationError(AuthKitError, ValueError):
    """Caller input was rejected before any network call."""


class TokenValidationError(AuthKitError):
    """A JWT failed validation."""


class TokenMalformedError(TokenValidationError):
    """The token is not a well-formed compact JWS with a JSON object payload."""


class TokenAlgorithmError(TokenValidationError):
    """The token is signed with an algorithm other than RS256."""


class TokenSignatureError(TokenValidationError):
    """The signature does not verify against any trusted key."""


class TokenExpiredError(TokenValidationError):
    """The ``exp`` claim is at or before the current time."""


class MalformedExpiryError(TokenValidationError):
    """The ``exp`` claim is present but not numeric."""


class AudienceMismatchError(TokenValidationError):
    """None of the expected audiences appear in the ``aud`` claim."""


class TokenExchangeError(AuthKitError):
    """The token endpoint rejected a grant."""

    def __init__(
        self,
        status_code: int,
        error: str | None = None,
        description: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.description = description
        message = f"token endpoint returned HTTP {status_code}"
        if error:
            message = f"{message}: {error}"
        if description:
            message = f"{message} ({description})"
        super().__init__(message)


class WebhookVerificationError(AuthKitError):
    """A signed webhook or interceptor payload was rejected."""


class MissingHeadersError(WebhookVerificationError):
    """One of the webhook-id/timestamp/signature headers is absent."""


class InvalidSecretError(WebhookVerificationError):
    """The signing secret is not of the form ``prefix_base64key``."""


class InvalidTimestampError(WebhookVerificationError):
    """The timestamp header is not a Unix epoch integer."""


class TimestampTooOldError(WebhookVerificationError):
    """The message is older than the tolerance window."""


class TimestampTooNewError(WebhookVerificationError):
    """The message is further in the future than the tolerance window."""


class InvalidSignatureError(WebhookVerificationError):
    """No ``v1`` signature matches the recomputed HMAC."""


class RPCValidationError(AuthKitError):
    """An RPC was rejected with field-level validation errors."""
