"""OAuth grants against the identity service token endpoint."""

import logging

import httpx
import pydantic

from authkit.core.errors import TokenExchangeError, ValidationError
from authkit.core.transport import CoreClient
from authkit.crypto.token_validator import KeySetProvider, validate_token
from authkit.oidc.types import (
    AuthenticationResponse,
    ClientTokenResponse,
    IdTokenClaims,
    TokenResponse,
)

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "oauth/token"

GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_REFRESH_TOKEN = "refresh_token"
GRANT_CLIENT_CREDENTIALS = "client_credentials"


def _error_fields(response: httpx.Response) -> tuple[str | None, str | None]:
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    return body.get("error"), body.get("error_description")


class TokenExchanger:
    """Runs the authorization_code, refresh_token and client_credentials grants."""

    def __init__(self, core: CoreClient, key_set_provider: KeySetProvider) -> None:
        self._core = core
        self._key_set_provider = key_set_provider

    def exchange(self, form: dict[str, str]) -> TokenResponse:
        """POST ``form`` to the token endpoint and decode the token material."""
        logger.debug("token exchange grant_type=%s", form.get("grant_type"))
        response = self._core.post_form(TOKEN_ENDPOINT, form)
        if response.is_error:
            error, description = _error_fields(response)
            raise TokenExchangeError(response.status_code, error, description)
        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, pydantic.ValidationError) as exc:
            raise TokenExchangeError(
                response.status_code, "invalid_response", str(exc)
            ) from exc

    def _client_form(self, grant_type: str) -> dict[str, str]:
        form = {"grant_type": grant_type, "client_id": self._core.client_id}
        if self._core.client_secret:
            form["client_secret"] = self._core.client_secret
        return form

    def authenticate_with_code(
        self,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> AuthenticationResponse:
        """Exchange an authorization code and decode the returned id_token."""
        if not code or not redirect_uri:
            raise ValidationError("code and redirect uri is required")
        form = self._client_form(GRANT_AUTHORIZATION_CODE)
        form["code"] = code
        form["redirect_uri"] = redirect_uri
        if code_verifier:
            form["code_verifier"] = code_verifier

        tokens = self.exchange(form)
        id_token = tokens.id_token or ""
        user = validate_token(id_token, self._key_set_provider, IdTokenClaims)
        return AuthenticationResponse(
            user=user,
            id_token=id_token,
            access_token=tokens.access_token,
            expires_in=tokens.expires_in,
            refresh_token=tokens.refresh_token,
        )

    def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for new token material."""
        if not refresh_token:
            raise ValidationError("refresh token is required")
        form = self._client_form(GRANT_REFRESH_TOKEN)
        form["refresh_token"] = refresh_token
        return self.exchange(form)

    def generate_client_token(self) -> ClientTokenResponse:
        """Obtain a token that authenticates this client itself."""
        if not self._core.client_secret:
            raise ValidationError("client secret is required for authentication")
        tokens = self.exchange(self._client_form(GRANT_CLIENT_CREDENTIALS))
        return ClientTokenResponse(
            access_token=tokens.access_token, expires_in=tokens.expires_in
        )

    def authenticate_client(self) -> None:
        """Refresh the bearer token used on outbound RPCs."""
        token = self.generate_client_token()
        self._core.state.set_access_token(token.access_token)
        logger.debug("client bearer token refreshed")
