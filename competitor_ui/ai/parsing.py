"""Tolerant JSON extraction from model output.

Models are asked for bare JSON but sometimes wrap it in prose or code fences.
``extract_json_object`` takes the first balanced ``{...}`` span and parses only
that. This is best-effort: prose before the JSON that itself contains an
unrelated brace pair will be picked up instead of the real payload.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from competitor_ui.errors import ScoringError

logger = logging.getLogger(__name__)


def find_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring, or None.

    Braces inside JSON string literals are ignored so that findings text like
    ``"uses {curly} quotes"`` does not end the span early.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first balanced JSON object in ``text``.

    Raises ScoringError (carrying the raw text) when nothing parseable is found.
    """
    span = find_balanced_object(text or "")
    if span is None:
        raise ScoringError("No JSON object found in AI response", raw_response=text)
    try:
        data = json.loads(span, strict=False)
    except json.JSONDecodeError as e:
        logger.debug("JSON decode failed at line %d col %d", e.lineno, e.colno)
        raise ScoringError(f"AI returned invalid JSON: {e}", raw_response=text) from e
    if not isinstance(data, dict):
        raise ScoringError("AI response JSON is not an object", raw_response=text)
    return data
