"""Helpers to turn loosely-typed detector payloads into page lists."""

import json
import math
import re
from typing import Any

from docsplit.pipeline.exceptions import AnalysisError

_ARRAY_RE = re.compile(r"\[[\d,\s]+\]")


def coerce_pages(values: Any) -> list[int]:
    """Keep the positive whole numbers of ``values``, in their original order."""
    if not isinstance(values, list):
        return []
    pages: list[int] = []
    for value in values:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            if value > 0:
                pages.append(value)
            continue
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            continue
        if math.isfinite(number) and number > 0 and number.is_integer():
            pages.append(int(number))
    return pages


def parse_pages_text(raw: str) -> list[int]:
    """Parse model output shaped like ``{"pages": [...]}`` or a bare array.

    Falls back to the first ``[n, m, ...]`` found in the text.

    Raises:
        AnalysisError: if no page array can be found.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        match = _ARRAY_RE.search(raw)
        if match is None:
            raise AnalysisError(f"Invalid detector response: {raw[:200]}") from None
        parsed = json.loads(match.group(0))

    if isinstance(parsed, dict):
        parsed = parsed.get("pages")
    if not isinstance(parsed, list):
        raise AnalysisError(f"Invalid detector response: {raw[:200]}")
    return coerce_pages(parsed)
