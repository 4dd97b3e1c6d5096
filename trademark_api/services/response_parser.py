"""Tolerant decoding of provider output into name records.

Providers are asked for a bare JSON array but routinely wrap it in Markdown
fences, nest it under an object key, or drop fields. Everything short of text
that isn't JSON at all is recovered locally:

- fences are stripped before decoding
- the candidate list is the top-level array, an array under a known key, or
  the first array-valued field of a top-level object
- each candidate is coerced field by field with defaults

Only undecodable text raises, because it means the generation itself is
unusable rather than merely sparse.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from trademark_api.schemas.trademarks import GeneratedName

logger = logging.getLogger(__name__)

MAX_NAMES = 10
DESCRIPTION_MAX_CHARS = 100

DEFAULT_NAME = "Unnamed"
DEFAULT_DESCRIPTION = "A creative brand name"
DEFAULT_INDUSTRY = "Retail"

# Object keys checked, in order, for the list of names
LIST_FIELD_ALIASES = ("trademarks", "names", "data")

_FENCE_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)

JsonValue = dict[str, Any] | list[Any] | str | int | float | bool | None


class ResponseParseError(ValueError):
    """Raised when provider output is not decodable as JSON at all."""


def strip_code_fences(raw_text: str) -> str:
    """Remove ```json / ``` markers and surrounding whitespace."""

    return _FENCE_RE.sub("", raw_text).strip()


def decode_response(raw_text: str) -> JsonValue:
    """Decode provider text into a generic JSON tree.

    Raises:
        ResponseParseError: If the text is not valid JSON after fence removal,
            or nests deeper than the decoder can follow.
    """

    cleaned = strip_code_fences(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Provider response is not valid JSON: {exc.msg}") from exc
    except (RecursionError, ValueError) as exc:
        raise ResponseParseError("Provider response could not be decoded") from exc


def extract_candidates(tree: JsonValue) -> list[Any]:
    """Find the list of name candidates inside a decoded response.

    Accepted shapes:
        - ``[...]``: used as-is
        - ``{"trademarks"|"names"|"data": [...]}``: first alias holding a list
        - ``{...}``: first field whose value is a list, in key order
        - anything else: no candidates
    """

    if isinstance(tree, list):
        return tree

    if isinstance(tree, dict):
        for alias in LIST_FIELD_ALIASES:
            value = tree.get(alias)
            if isinstance(value, list):
                return value
        for value in tree.values():
            if isinstance(value, list):
                return value

    return []


def _coerce_text(value: Any, default: str) -> str:
    """Render a JSON value as display text.

    - non-empty string: trimmed
    - number: its decimal form
    - object or array: compact JSON
    - null, false, empty string, zero: ``default``
    - containers too deep to encode: ``default``
    """

    if value is None or value is False or value == "" or value == 0:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
        except (RecursionError, ValueError):
            return default
    return str(value)


def _coerce_name(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_NAME


def coerce_candidate(
    candidate: Any,
    *,
    description_max_chars: int = DESCRIPTION_MAX_CHARS,
) -> GeneratedName:
    """Turn one decoded candidate into a GeneratedName; never raises.

    Accepted shapes:
        - object: ``name``, ``description`` and ``industry`` read from it
        - string: taken as the name
        - anything else: all defaults
    """

    if isinstance(candidate, dict):
        name = _coerce_name(candidate.get("name"))
        description = _coerce_text(candidate.get("description"), DEFAULT_DESCRIPTION)
        industry = _coerce_text(candidate.get("industry"), DEFAULT_INDUSTRY)
    elif isinstance(candidate, str):
        name = _coerce_name(candidate)
        description = DEFAULT_DESCRIPTION
        industry = DEFAULT_INDUSTRY
    else:
        name, description, industry = DEFAULT_NAME, DEFAULT_DESCRIPTION, DEFAULT_INDUSTRY

    return GeneratedName(
        name=name,
        description=description[:description_max_chars],
        industry=industry,
    )


def parse_trademark_response(
    raw_text: str,
    *,
    max_names: int = MAX_NAMES,
    description_max_chars: int = DESCRIPTION_MAX_CHARS,
) -> list[GeneratedName]:
    """Parse provider output into at most ``max_names`` records.

    Args:
        raw_text: Text returned by the provider.
        max_names: Cap on returned records.
        description_max_chars: Descriptions are cut to this length.

    Returns:
        Records in provider order; possibly empty.

    Raises:
        ResponseParseError: If ``raw_text`` is not JSON once fences are removed.
    """

    tree = decode_response(raw_text)
    candidates = extract_candidates(tree)

    if len(candidates) > max_names:
        logger.info(
            "response_parser.truncated",
            extra={"candidates": len(candidates), "max_names": max_names},
        )

    names = [
        coerce_candidate(candidate, description_max_chars=description_max_chars)
        for candidate in candidates[:max_names]
    ]

    if not names:
        logger.warning("response_parser.empty", extra={"top_level": type(tree).__name__})

    return names
