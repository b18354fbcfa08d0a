"""Type definitions for token material, claims and request options."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class TokenResponse(BaseModel):
    """Token endpoint response: the raw material of a successful grant."""

    access_token: str
    id_token: str | None = None
    refresh_token: str | None = None
    expires_in: int = 0


class ClientTokenResponse(BaseModel):
    """Result of a client_credentials grant."""

    access_token: str
    expires_in: int = 0


class Claims(BaseModel):
    """Typed view over a verified JWT payload.

    ``claims`` exposes the full name -> value mapping the typed fields were
    projected from, so custom claims remain reachable.
    """

    model_config = ConfigDict(extra="allow")

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Self:
        """Project a decoded payload mapping into this shape."""
        instance = cls.model_validate(payload)
        instance._raw = payload
        return instance

    @property
    def claims(self) -> dict[str, Any]:
        return self._raw


class Identity(BaseModel):
    """A linked identity from an upstream identity provider."""

    connection_id: str = ""
    organization_id: str = ""
    connection_type: str = ""
    provider_name: str = ""
    social: bool = False
    provider_raw_attributes: str = ""


class IdTokenClaims(Claims):
    """OIDC id_token claims describing the signed-in user."""

    id: str = Field(default="", alias="sub")
    username: str = Field(default="", alias="preferred_username")
    name: str = ""
    given_name: str = ""
    family_name: str = ""
    email: str = ""
    email_verified: bool = False
    phone_number: str = ""
    phone_number_verified: bool = False
    profile: str = ""
    picture: str = ""
    gender: str = ""
    birthdate: str = ""
    zoneinfo: str = ""
    locale: str = ""
    updated_at: str | int | None = None
    identities: list[Identity] = Field(default_factory=list)
    metadata: str = ""


User = IdTokenClaims


class TokenClaims(Claims):
    """Registered claims shared by access tokens and id tokens."""

    sub: str = ""
    iss: str = ""
    aud: list[str] = Field(default_factory=list)
    iat: int | None = None
    exp: int | None = None

    @field_validator("aud", mode="before")
    @classmethod
    def _normalize_audience(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        if value is None:
            return []
        return value


class AccessTokenClaims(TokenClaims):
    """Claims of an access token issued by the identity service."""


class IdpInitiatedLoginClaims(Claims):
    """Claims of an IdP-initiated login token. Carries no ``exp``."""

    connection_id: str = ""
    organization_id: str = ""
    login_hint: str = ""
    relay_state: str | None = None


class AuthenticationResponse(BaseModel):
    """Result of exchanging an authorization code."""

    user: IdTokenClaims
    id_token: str
    access_token: str
    expires_in: int = 0
    refresh_token: str | None = None


class AuthorizationUrlOptions(BaseModel):
    """Optional parameters for the authorization URL."""

    connection_id: str = ""
    organization_id: str = ""
    scopes: list[str] | None = None
    state: str = ""
    nonce: str = ""
    domain_hint: str = ""
    login_hint: str = ""
    code_challenge: str = ""
    code_challenge_method: str = ""
    provider: str = ""
    prompt: str = ""


class LogoutUrlOptions(BaseModel):
    """Optional parameters for the logout URL."""

    id_token_hint: str = ""
    post_logout_redirect_uri: str = ""
    state: str = ""


class ValidateTokenOptions(BaseModel):
    """Extra checks applied after signature and expiry validation."""

    audience: list[str] = Field(default_factory=list)


class PKCEOptions(BaseModel):
    """Inputs for PKCE generation.

    ``verifier_length`` is ignored when ``code_verifier`` is supplied.
    """

    code_challenge_method: str = ""
    verifier_length: int = 0
    code_verifier: str = ""


class PKCEConfiguration(BaseModel):
    """A code verifier with its derived challenge."""

    code_verifier: str
    code_challenge: str
    code_challenge_method: str
