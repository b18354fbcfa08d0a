"""Shared HTTP transport and per-client authentication state."""

import logging
import platform
import threading
from typing import Any

import httpx

from authkit.core.settings import SDK_VERSION, ClientSettings

logger = logging.getLogger(__name__)


def build_user_agent() -> str:
    """Describe the SDK and runtime for the user-agent header."""
    return (
        f"{SDK_VERSION} Python/{platform.python_version()} "
        f"({platform.system().lower()}; {platform.machine()})"
    )


class AuthenticatedClientState:
    """Bearer token held by one client instance."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._access_token: str | None = None

    @property
    def access_token(self) -> str | None:
        with self._lock:
            return self._access_token

    def set_access_token(self, token: str) -> None:
        with self._lock:
            self._access_token = token


class CoreClient:
    """Owns the HTTP client, identification headers and bearer token.

    Every outbound request, HTTP or RPC, takes its headers from
    :meth:`request_headers` so the current token is read at send time.
    """

    def __init__(
        self,
        settings: ClientSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.state = AuthenticatedClientState()
        self.user_agent = build_user_agent()
        self._transport = transport
        self._http = httpx.Client(
            timeout=settings.http_timeout,
            transport=transport,
            event_hooks={"request": [self._inject_headers]},
        )

    @property
    def env_url(self) -> str:
        return self.settings.env_url

    @property
    def client_id(self) -> str:
        return self.settings.client_id

    @property
    def client_secret(self) -> str:
        return self.settings.client_secret

    def request_headers(self) -> dict[str, str]:
        """Identification headers plus ``Authorization`` when a token is held."""
        headers = {
            "user-agent": self.user_agent,
            "x-sdk-version": SDK_VERSION,
            "x-api-version": self.settings.api_version,
        }
        token = self.state.access_token
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _inject_headers(self, request: httpx.Request) -> None:
        request.headers.update(self.request_headers())

    def get_json(self, path: str) -> Any:
        """GET ``{env_url}/{path}`` and decode the JSON body."""
        url = f"{self.env_url}/{path}"
        logger.debug("GET %s", url)
        response = self._http.get(url)
        response.raise_for_status()
        return response.json()

    def post_form(self, path: str, data: dict[str, str]) -> httpx.Response:
        """POST a form-encoded body; the caller inspects the status."""
        url = f"{self.env_url}/{path}"
        logger.debug("POST %s", url)
        return self._http.post(url, data=data)

    def copy_with_secret(self, client_secret: str) -> "CoreClient":
        """New core with the same configuration and transport but fresh state."""
        settings = self.settings.model_copy(update={"client_secret": client_secret})
        return CoreClient(settings, transport=self._transport)

    def close(self) -> None:
        self._http.close()
