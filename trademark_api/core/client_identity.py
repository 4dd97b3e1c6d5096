"""Anonymous client identification.

A client identifier is a best-effort fingerprint (``fp-<base36 hash>``) used
as a rate-limit partition key and as the index key for stored results. It is
not a credential: any value with the expected shape is accepted.

Resolution policy: the browser persists its own identifier and sends it with
each request; that value wins. When a caller sends nothing, the server
derives one from request traits so the caller is still rate limited.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Mapping

from fastapi import Request

from trademark_api.core.config import AppSettings, settings
from trademark_api.core.errors import InvalidRequestAppError

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_RE = re.compile(r"^[A-Za-z0-9_-]+$")

INVALID_REQUEST_MESSAGE = "Invalid request. Please refresh the page and try again."


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def derive_client_identifier(traits: Mapping[str, str], *, prefix: str = "fp-") -> str:
    """Hash a set of caller traits into an opaque identifier.

    The same traits always produce the same identifier; key order is
    irrelevant.

    Args:
        traits: Caller characteristics (user agent, language, address, ...).
        prefix: Identifier prefix.

    Returns:
        Identifier such as ``"fp-01x9c0q2k7m3a"``.

    Examples:
        >>> derive_client_identifier({"ua": "x"}) == derive_client_identifier({"ua": "x"})
        True
    """

    canonical = json.dumps(dict(traits), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    # 64 bits fit in 13 base36 digits; pad so identifiers have a fixed length
    return f"{prefix}{_to_base36(int.from_bytes(digest[:8], 'big')).rjust(13, '0')}"


def validate_client_identifier(
    value: str | None,
    *,
    app_settings: AppSettings | None = None,
) -> str:
    """Check that a client identifier has the expected shape.

    Args:
        value: Identifier as received from the caller.
        app_settings: Shape configuration; defaults to global settings.

    Returns:
        The trimmed identifier.

    Raises:
        InvalidRequestAppError: If the identifier is empty or malformed.
    """

    cfg = app_settings or settings.app
    candidate = (value or "").strip()

    if not candidate:
        raise InvalidRequestAppError(
            code="client_id_missing",
            message=INVALID_REQUEST_MESSAGE,
            details={"actual_length": 0},
        )

    if not candidate.startswith(cfg.client_id_prefix):
        raise InvalidRequestAppError(
            code="client_id_bad_prefix",
            message=INVALID_REQUEST_MESSAGE,
            details={"expected_prefix": cfg.client_id_prefix},
        )

    if not cfg.client_id_min_length <= len(candidate) <= cfg.client_id_max_length:
        raise InvalidRequestAppError(
            code="client_id_bad_length",
            message=INVALID_REQUEST_MESSAGE,
            details={
                "min_length": cfg.client_id_min_length,
                "max_length": cfg.client_id_max_length,
                "actual_length": len(candidate),
            },
        )

    if not _SUFFIX_RE.match(candidate[len(cfg.client_id_prefix):]):
        raise InvalidRequestAppError(
            code="client_id_bad_charset",
            message=INVALID_REQUEST_MESSAGE,
        )

    return candidate


def _request_traits(request: Request) -> dict[str, str]:
    return {
        "client_host": request.client.host if request.client else "unknown",
        "user_agent": request.headers.get("user-agent", "")[:200],
        "accept_language": request.headers.get("accept-language", "")[:100],
    }


def resolve_client_identifier(
    request: Request,
    *,
    supplied: str | None = None,
    header_value: str | None = None,
    app_settings: AppSettings | None = None,
) -> str:
    """Pick the identifier for the current request.

    A value supplied by the client (body first, then header) is returned
    untouched, even if malformed; validation happens downstream so forged
    payloads are rejected before any quota is consumed.
    """

    if supplied is not None:
        return supplied
    if header_value is not None:
        return header_value

    cfg = app_settings or settings.app
    return derive_client_identifier(_request_traits(request), prefix=cfg.client_id_prefix)
