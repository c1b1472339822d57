from __future__ import annotations

import json
import re
from typing import Any

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_LEADING_GLYPH_RE = re.compile(r"^\s*[•\-*]\s*")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")
_NUMERIC_KEY_RE = re.compile(r"^\s*\d+\s*$")
_FENCED_JSON_RE = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_FENCED_ANY_RE = re.compile(r"```[a-zA-Z]*\s*(.*?)```", re.DOTALL)


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def strip_leading_glyph(line: str) -> str:
    return _LEADING_GLYPH_RE.sub("", line, count=1).strip()


def split_lines(text: str) -> list[str]:
    """Non-empty, trimmed lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def is_numeric_key(key: Any) -> bool:
    return isinstance(key, int) or (isinstance(key, str) and bool(_NUMERIC_KEY_RE.match(key)))


def is_blank_value(text: str | None) -> bool:
    if text is None:
        return True
    stripped = text.strip()
    return not stripped or stripped.lower() == "null"


def sanitize_text(text: str) -> str:
    cleaned = _SURROGATE_RE.sub("", text)
    return _CONTROL_RE.sub("", cleaned)


def sanitize_payload(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, list):
        return [sanitize_payload(item) for item in value]
    if isinstance(value, dict):
        return {sanitize_text(str(key)): sanitize_payload(item) for key, item in value.items()}
    return value


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def parse_json_text(text: str) -> Any:
    """Parse model output that may wrap JSON in code fences or prose.

    Tries the whole text, then a ```json fence, then any fence, then the
    outermost {...} block. Raises ValueError when nothing parses.
    """
    candidates = [text.strip()]
    candidates.extend(match.strip() for match in _FENCED_JSON_RE.findall(text))
    candidates.extend(match.strip() for match in _FENCED_ANY_RE.findall(text))
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        if not candidate:
            continue
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
    raise ValueError("No JSON document found in text.")
