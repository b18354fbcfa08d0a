"""Public entry point tying transport, tokens, JWKS, PKCE and webhooks together."""

from collections.abc import Mapping
from types import TracebackType
from typing import Self

import httpx

from authkit.core.settings import ClientSettings
from authkit.core.transport import CoreClient
from authkit.crypto.jwks import JWKSCache
from authkit.crypto.token_validator import check_audience, validate_token
from authkit.oidc import pkce, urls
from authkit.oidc.token_exchange import TokenExchanger
from authkit.oidc.types import (
    AccessTokenClaims,
    AuthenticationResponse,
    AuthorizationUrlOptions,
    ClientTokenResponse,
    IdpInitiatedLoginClaims,
    LogoutUrlOptions,
    PKCEConfiguration,
    PKCEOptions,
    TokenClaims,
    TokenResponse,
    ValidateTokenOptions,
)
from authkit.rpc.executor import DEFAULT_MAX_RETRY, RPCExecutor
from authkit.rpc.types import RequestT, ResponseT, RPCCall
from authkit.webhooks import verifier


class AuthClient:
    """Client for one identity service environment.

    Holds the bearer token used on RPCs and the JWKS fetched on first token
    validation; both live as long as the instance.
    """

    def __init__(
        self,
        env_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        settings: ClientSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        overrides = {
            name: value
            for name, value in (
                ("env_url", env_url),
                ("client_id", client_id),
                ("client_secret", client_secret),
            )
            if value is not None
        }
        base = settings or ClientSettings()
        if overrides:
            base = ClientSettings(**{**base.model_dump(), **overrides})
        self._init_core(CoreClient(base, transport=transport))

    def _init_core(self, core: CoreClient) -> None:
        self._core = core
        self._jwks = JWKSCache(core)
        self._tokens = TokenExchanger(core, self._jwks.get_key_set)

    @classmethod
    def _from_core(cls, core: CoreClient) -> "AuthClient":
        client = cls.__new__(cls)
        client._init_core(core)
        return client

    @property
    def settings(self) -> ClientSettings:
        return self._core.settings

    @property
    def access_token(self) -> str | None:
        """Bearer token currently attached to outbound RPCs."""
        return self._core.state.access_token

    def with_secret(self, client_secret: str) -> "AuthClient":
        """Copy of this client using ``client_secret``, with fresh state."""
        return self._from_core(self._core.copy_with_secret(client_secret))

    # OAuth

    def get_authorization_url(
        self, redirect_uri: str, options: AuthorizationUrlOptions | None = None
    ) -> str:
        return urls.build_authorization_url(
            self._core.env_url, self._core.client_id, redirect_uri, options
        )

    def get_logout_url(self, options: LogoutUrlOptions | None = None) -> str:
        return urls.build_logout_url(self._core.env_url, options)

    def authenticate_with_code(
        self, code: str, redirect_uri: str, code_verifier: str | None = None
    ) -> AuthenticationResponse:
        return self._tokens.authenticate_with_code(code, redirect_uri, code_verifier)

    def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        return self._tokens.refresh_access_token(refresh_token)

    def generate_client_token(self) -> ClientTokenResponse:
        return self._tokens.generate_client_token()

    def authenticate_client(self) -> None:
        """Obtain a client_credentials token for subsequent RPCs."""
        self._tokens.authenticate_client()

    # Token validation

    def get_idp_initiated_login_claims(self, token: str) -> IdpInitiatedLoginClaims:
        return validate_token(token, self._jwks.get_key_set, IdpInitiatedLoginClaims)

    def get_access_token_claims(self, access_token: str) -> AccessTokenClaims:
        return validate_token(access_token, self._jwks.get_key_set, AccessTokenClaims)

    def validate_access_token(self, access_token: str) -> bool:
        """True when valid; validation failures raise."""
        self.get_access_token_claims(access_token)
        return True

    def validate_token_with_options(
        self, token: str, options: ValidateTokenOptions | None = None
    ) -> bool:
        """Validate a JWT and, if requested, its audience."""
        claims = validate_token(token, self._jwks.get_key_set, TokenClaims)
        if options is not None:
            check_audience(claims, options.audience)
        return True

    # PKCE

    def generate_pkce_configuration(
        self, options: PKCEOptions | None = None
    ) -> PKCEConfiguration:
        return pkce.generate_pkce_configuration(options)

    # Signed payloads

    def verify_webhook_payload(
        self, secret: str, headers: Mapping[str, str], payload: bytes
    ) -> bool:
        return verifier.verify_webhook_payload(secret, headers, payload)

    def verify_interceptor_payload(
        self, secret: str, headers: Mapping[str, str], payload: bytes
    ) -> bool:
        return verifier.verify_interceptor_payload(secret, headers, payload)

    # RPC

    def execute(
        self,
        call: RPCCall[RequestT, ResponseT],
        request: RequestT,
        max_retry: int = DEFAULT_MAX_RETRY,
    ) -> ResponseT:
        """Run a generated RPC stub method with the re-authentication policy."""
        return RPCExecutor(
            call,
            request,
            headers=self._core.request_headers,
            reauthenticate=self._tokens.authenticate_client,
            max_retry=max_retry,
        ).execute()

    def close(self) -> None:
        self._core.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
