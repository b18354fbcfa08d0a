"""Client settings loaded from arguments or environment variables."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SDK_VERSION = "authkit-python/0.1.0"
API_VERSION_DEFAULT = "20260112"
HTTP_TIMEOUT_DEFAULT = 10.0


class ClientSettings(BaseSettings):
    """Connection settings for the identity service."""

    model_config = SettingsConfigDict(env_prefix="AUTHKIT_")

    env_url: str = "http://localhost:8000"
    client_id: str = ""
    client_secret: str = ""
    api_version: str = API_VERSION_DEFAULT
    http_timeout: float = HTTP_TIMEOUT_DEFAULT

    @field_validator("env_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
