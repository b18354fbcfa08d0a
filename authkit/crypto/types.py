"""Type definitions for JWK, JWKS and the trusted signing key set."""

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from pydantic import BaseModel, ConfigDict


class JWKEntry(BaseModel):
    """Single JWK entry in a JWKS document."""

    model_config = ConfigDict(extra="allow")

    kty: str
    use: str = "sig"
    alg: str = "RS256"
    kid: str = ""
    n: str = ""
    e: str = ""


class JWKSDocument(BaseModel):
    """JSON Web Key Set document served by the identity service."""

    keys: list[JWKEntry]


class SigningKey(BaseModel):
    """A trusted RSA public key ready for signature verification."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kid: str
    alg: str
    public_key: RSAPublicKey


class SigningKeySet(BaseModel):
    """Immutable set of keys trusted for RS256 verification."""

    model_config = ConfigDict(frozen=True)

    keys: tuple[SigningKey, ...] = ()

    def find(self, kid: str) -> SigningKey | None:
        """Return the key with the given id, if any."""
        for key in self.keys:
            if key.kid == kid:
                return key
        return None

    def __len__(self) -> int:
        return len(self.keys)
