"""Shared test fixtures for authkit."""

import base64
import json
import time
from collections.abc import Callable, Iterator
from typing import Any
from urllib.parse import parse_qs

import httpx
import jwt
import pytest
import uuid_utils
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel

from authkit.client import AuthClient

ENV_URL = "https://auth.example.com"
CLIENT_ID = "client-1"
CLIENT_SECRET = "client-secret"
RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("AUTHKIT_ENV_URL", ENV_URL)
    monkeypatch.delenv("AUTHKIT_CLIENT_SECRET", raising=False)


class SigningKeyPair(BaseModel):
    """An RSA keypair with its JWK representation."""

    kid: str
    private_key_pem: str
    jwk: dict[str, str]


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def generate_keypair() -> SigningKeyPair:
    """Generate an RSA-2048 keypair and its public JWK."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    numbers = private_key.public_key().public_numbers()
    kid = str(uuid_utils.uuid7())
    return SigningKeyPair(
        kid=kid,
        private_key_pem=private_pem,
        jwk={
            "kty": "RSA",
            "use": "sig",
            "alg": "RS256",
            "kid": kid,
            "n": _int_to_base64url(numbers.n),
            "e": _int_to_base64url(numbers.e),
        },
    )


@pytest.fixture(scope="session")
def keypair() -> SigningKeyPair:
    """Key served in the JWKS."""
    return generate_keypair()


@pytest.fixture(scope="session")
def rogue_keypair() -> SigningKeyPair:
    """Key that is never served in the JWKS."""
    return generate_keypair()


TokenFactory = Callable[..., str]


@pytest.fixture
def make_token(keypair: SigningKeyPair) -> TokenFactory:
    """Sign a claims dict as an RS256 JWT (defaults to the served key)."""

    def _make(
        claims: dict[str, Any],
        key: SigningKeyPair | None = None,
        kid: str | None = None,
    ) -> str:
        signer = key or keypair
        return jwt.encode(
            claims,
            signer.private_key_pem,
            algorithm="RS256",
            headers={"kid": kid if kid is not None else signer.kid},
        )

    return _make


@pytest.fixture
def id_claims() -> dict[str, Any]:
    """Typical id_token payload valid for an hour."""
    now = int(time.time())
    claims = {
        "sub": "usr_123",
        "iss": ENV_URL,
        "aud": [CLIENT_ID],
        "iat": now,
        "exp": now + 3600,
        "email": "alice@example.com",
        "name": "Alice",
        "preferred_username": "alice",
        "identities": [
            {
                "connection_id": "conn_1",
                "organization_id": "org_1",
                "connection_type": "OIDC",
                "provider_name": "OKTA",
                "social": False,
            }
        ],
    }
    return claims


class FakeIdentityService:
    """In-memory stand-in for the identity service's HTTP endpoints."""

    def __init__(self, jwks: dict[str, Any]) -> None:
        self.jwks = jwks
        self.jwks_status = 200
        self.token_status = 200
        self.token_body: dict[str, Any] = {
            "access_token": "at_default",
            "expires_in": 3600,
        }
        self.requests: list[httpx.Request] = []

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def forms(self) -> list[dict[str, str]]:
        return [
            {k: v[0] for k, v in parse_qs(r.content.decode()).items()}
            for r in self.requests
            if r.url.path == "/oauth/token"
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/keys":
            return httpx.Response(self.jwks_status, json=self.jwks)
        if request.url.path == "/oauth/token":
            return httpx.Response(self.token_status, content=json.dumps(self.token_body))
        return httpx.Response(404)


@pytest.fixture
def service(keypair: SigningKeyPair) -> FakeIdentityService:
    return FakeIdentityService({"keys": [keypair.jwk]})


@pytest.fixture
def client(service: FakeIdentityService) -> Iterator[AuthClient]:
    """AuthClient wired to the fake service."""
    with AuthClient(
        ENV_URL,
        CLIENT_ID,
        CLIENT_SECRET,
        transport=httpx.MockTransport(service.handle),
    ) as ac:
        yield ac
