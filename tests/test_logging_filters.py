"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from trademark_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_api_keys():
    """Ensure SensitiveDataFilter redacts API key fields."""

    logger, stream = _capture("test_redaction")

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "x-api-key": "another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_prompts_and_provider_output():
    """Prompts, completions and raw identifiers never reach the log line."""

    logger, stream = _capture("test_prompt_redaction")

    logger.warning(
        "generation.unparseable_response",
        extra={
            "prompt": "Act as a trademark naming specialist",
            "raw_response": "Here are some names: NEXORA",
            "client_identifier": "fp-abc123",
            "response_chars": 27,
        },
    )

    output = stream.getvalue()

    assert "naming specialist" not in output
    assert "NEXORA" not in output
    assert "fp-abc123" not in output
    assert "[REDACTED]" in output
    assert "response_chars" in output


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""

    logger, stream = _capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "route": "/v1/trademarks/generate",
            "status": 200,
            "duration_ms": 150.5,
            "client_hash": hash_identifier("fp-abc123"),
        },
    )

    payload = json.loads(stream.getvalue())

    assert payload["request_id"] == "req-123"
    assert payload["route"] == "/v1/trademarks/generate"
    assert payload["status"] == 200
    assert payload["client_hash"] == hash_identifier("fp-abc123")
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""

    logger, stream = _capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "x-api-key": "secret-key",
                "user-agent": "pytest",
            },
            "safe_data": {
                "count": 5,
                "type": "test",
            },
        },
    )

    output = stream.getvalue()

    assert "secret-key" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output
    assert "test" in output


def test_request_id_from_context_is_attached():
    logger, stream = _capture("test_request_id")

    set_request_id("ctx-req-42")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()
    logger.info("without_context")

    first, second = (json.loads(line) for line in stream.getvalue().splitlines())
    assert first["request_id"] == "ctx-req-42"
    assert "request_id" not in second


def test_hash_identifier_is_stable_and_opaque():
    digest = hash_identifier("fp-abc123")

    assert digest == hash_identifier("fp-abc123")
    assert digest != hash_identifier("fp-abc124")
    assert len(digest) == 16
    assert "abc123" not in digest
