"""Locate and decode the JSON object embedded in a free-form model completion.

The span runs from the first `{` to the last `}` of the text. This is a best-effort heuristic,
not a tokenizer: several independent JSON fragments, or braces inside string values, make the
span invalid and the result is `malformed_json`. Callers rely on that behavior, so keep it.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

from src.intent.schema import ErrorKind


@dataclass(frozen=True)
class ExtractionError:
    """Why no JSON object could be taken from a completion."""

    kind: ErrorKind
    detail: str


def _reject_constant(name: str) -> Any:
    # `NaN`, `Infinity` and `-Infinity` are not JSON.
    raise ValueError(f"invalid JSON constant: {name}")


def _finite_float(literal: str) -> float:
    # Overflowing literals such as `1e400` would decode to infinity.
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {literal}")
    return value


def find_json_span(text: str) -> tuple[int, int] | None:
    """Return `(start, end)` slice bounds of the brace span, or `None` if there is none."""

    value = text or ""
    start = value.find("{")
    end = value.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return start, end + 1


def extract_json_object(text: str) -> dict[str, Any] | ExtractionError:
    """Decode the brace span of `text`.

    Returns:
        The decoded object, or an `ExtractionError` tagged `no_json_found` / `malformed_json`.
        Never raises for bad input.
    """

    span = find_json_span(text)
    if span is None:
        return ExtractionError(kind=ErrorKind.no_json_found, detail="no brace-delimited span")

    start, end = span
    try:
        # A decodable span always starts with `{`, so a successful decode is a dict.
        return json.loads(text[start:end], parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as exc:
        return ExtractionError(kind=ErrorKind.malformed_json, detail=str(exc))
