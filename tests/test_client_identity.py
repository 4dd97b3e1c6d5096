"""Tests for client identifier derivation, validation and resolution."""

from unittest.mock import MagicMock

import pytest

from trademark_api.core.client_identity import (
    derive_client_identifier,
    resolve_client_identifier,
    validate_client_identifier,
)
from trademark_api.core.config import AppSettings
from trademark_api.core.errors import InvalidRequestAppError


def _request(host: str = "203.0.113.7", headers: dict[str, str] | None = None) -> MagicMock:
    request = MagicMock()
    request.client.host = host
    request.headers = headers or {"user-agent": "pytest-browser/1.0", "accept-language": "en-US"}
    return request


class TestDeriveClientIdentifier:
    def test_shape(self) -> None:
        identifier = derive_client_identifier({"user_agent": "x"})

        assert identifier.startswith("fp-")
        assert len(identifier) == len("fp-") + 13
        assert identifier[3:].isalnum()
        assert identifier[3:] == identifier[3:].lower()

    def test_stable_and_order_independent(self) -> None:
        a = derive_client_identifier({"user_agent": "x", "language": "en"})
        b = derive_client_identifier({"language": "en", "user_agent": "x"})

        assert a == b

    def test_different_traits_differ(self) -> None:
        assert derive_client_identifier({"tz": "UTC"}) != derive_client_identifier({"tz": "CET"})

    def test_derived_identifier_passes_validation(self, app_settings: AppSettings) -> None:
        identifier = derive_client_identifier({"user_agent": "anything"})

        assert validate_client_identifier(identifier, app_settings=app_settings) == identifier


class TestValidateClientIdentifier:
    @pytest.mark.parametrize("value", ["fp-abc123", "  fp-abc123  ", "fp-A_b-9z"])
    def test_accepts_expected_shape(self, value: str, app_settings: AppSettings) -> None:
        assert validate_client_identifier(value, app_settings=app_settings) == value.strip()

    @pytest.mark.parametrize(
        "value, code",
        [
            ("", "client_id_missing"),
            (None, "client_id_missing"),
            ("   ", "client_id_missing"),
            ("abc123", "client_id_bad_prefix"),
            ("192.168.0.1", "client_id_bad_prefix"),
            ("fp-a", "client_id_bad_length"),
            ("fp-" + "a" * 80, "client_id_bad_length"),
            ("fp-abc 123", "client_id_bad_charset"),
            ("fp-<script>", "client_id_bad_charset"),
        ],
    )
    def test_rejects_malformed(self, value: str | None, code: str, app_settings: AppSettings) -> None:
        with pytest.raises(InvalidRequestAppError) as exc_info:
            validate_client_identifier(value, app_settings=app_settings)

        assert exc_info.value.code == code
        assert exc_info.value.kind == "invalid_request"
        assert "Invalid request" in exc_info.value.message

    def test_custom_prefix(self, app_settings: AppSettings) -> None:
        custom = app_settings.model_copy(update={"client_id_prefix": "cid_"})

        assert validate_client_identifier("cid_12345", app_settings=custom) == "cid_12345"
        with pytest.raises(InvalidRequestAppError):
            validate_client_identifier("fp-12345", app_settings=custom)


class TestResolveClientIdentifier:
    def test_supplied_value_wins(self) -> None:
        assert resolve_client_identifier(_request(), supplied="fp-body", header_value="fp-head") == "fp-body"

    def test_header_used_when_body_absent(self) -> None:
        assert resolve_client_identifier(_request(), header_value="fp-head") == "fp-head"

    def test_empty_supplied_value_is_passed_through(self) -> None:
        assert resolve_client_identifier(_request(), supplied="", header_value="fp-head") == ""

    def test_derived_from_request_when_nothing_supplied(self) -> None:
        first = resolve_client_identifier(_request())
        second = resolve_client_identifier(_request())
        other = resolve_client_identifier(_request(host="198.51.100.1"))

        assert first.startswith("fp-")
        assert first == second
        assert first != other
