"""Tests for PKCE generation and verification."""

import hashlib
from base64 import urlsafe_b64encode

import pytest

from authkit.core.errors import ValidationError
from authkit.oidc.pkce import (
    VERIFIER_CHARSET,
    compute_code_challenge,
    generate_code_verifier,
    generate_pkce_configuration,
    validate_code_verifier,
    verify_pkce,
)
from authkit.oidc.types import PKCEOptions

RFC_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def _challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class TestValidateCodeVerifier:
    """Tests for verifier length and charset rules."""

    @pytest.mark.parametrize("length", [43, 64, 128])
    def test_accepts_valid_lengths(self, length: int) -> None:
        validate_code_verifier("a" * length)

    @pytest.mark.parametrize("length", [0, 42, 129])
    def test_rejects_invalid_lengths(self, length: int) -> None:
        with pytest.raises(ValidationError, match="length"):
            validate_code_verifier("a" * length)

    def test_accepts_every_unreserved_character(self) -> None:
        validate_code_verifier(VERIFIER_CHARSET[:128])
        validate_code_verifier(VERIFIER_CHARSET[-43:])

    @pytest.mark.parametrize("bad", ["+", "/", "=", " ", "é", "%"])
    def test_rejects_reserved_characters(self, bad: str) -> None:
        with pytest.raises(ValidationError, match="unreserved"):
            validate_code_verifier("a" * 50 + bad)


class TestGenerateCodeVerifier:
    """Tests for random verifier generation."""

    def test_default_length(self) -> None:
        assert len(generate_code_verifier()) == 64

    def test_uses_charset_only(self) -> None:
        verifier = generate_code_verifier(128)
        assert set(verifier) <= set(VERIFIER_CHARSET)

    def test_unique_verifiers(self) -> None:
        verifiers = {generate_code_verifier() for _ in range(100)}
        assert len(verifiers) == 100

    @pytest.mark.parametrize("length", [42, 129])
    def test_rejects_out_of_range_length(self, length: int) -> None:
        with pytest.raises(ValidationError):
            generate_code_verifier(length)


class TestGeneratePKCEConfiguration:
    """Tests for the combined verifier/challenge generator."""

    def test_defaults(self) -> None:
        config = generate_pkce_configuration()
        assert len(config.code_verifier) == 64
        assert config.code_challenge_method == "S256"
        assert config.code_challenge == _challenge(config.code_verifier)

    def test_challenge_is_unpadded(self) -> None:
        config = generate_pkce_configuration(PKCEOptions())
        assert "=" not in config.code_challenge
        assert len(config.code_challenge) == 43

    def test_custom_length(self) -> None:
        config = generate_pkce_configuration(PKCEOptions(verifier_length=100))
        assert len(config.code_verifier) == 100

    def test_supplied_verifier_used_verbatim(self) -> None:
        config = generate_pkce_configuration(
            PKCEOptions(code_verifier=RFC_VERIFIER, verifier_length=10)
        )
        assert config.code_verifier == RFC_VERIFIER
        assert config.code_challenge == RFC_CHALLENGE

    def test_invalid_supplied_verifier(self) -> None:
        with pytest.raises(ValidationError):
            generate_pkce_configuration(PKCEOptions(code_verifier="short"))

    def test_lowercase_method_accepted(self) -> None:
        config = generate_pkce_configuration(PKCEOptions(code_challenge_method="s256"))
        assert config.code_challenge_method == "S256"

    def test_plain_method_rejected(self) -> None:
        with pytest.raises(ValidationError, match="only S256"):
            generate_pkce_configuration(PKCEOptions(code_challenge_method="plain"))

    def test_invalid_length_option(self) -> None:
        with pytest.raises(ValidationError):
            generate_pkce_configuration(PKCEOptions(verifier_length=20))


class TestVerifyPKCE:
    """Tests for S256 PKCE verification."""

    def test_rfc_example(self) -> None:
        assert compute_code_challenge(RFC_VERIFIER) == RFC_CHALLENGE
        assert verify_pkce(RFC_VERIFIER, RFC_CHALLENGE) is True

    def test_invalid_verifier(self) -> None:
        assert verify_pkce("wrong-verifier", _challenge("correct-verifier")) is False

    def test_empty_verifier_fails(self) -> None:
        assert verify_pkce("", "some-challenge") is False
