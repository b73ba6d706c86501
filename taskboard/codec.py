"""Compact JSON encoding and a best-effort decoder for arrays of flat objects.

Only the subset the task and session files need is covered. ``encode`` handles
strings, numbers, booleans, lists and string-keyed mappings. ``decode_records``
reads a top-level array of flat objects back into ``dict[str, str]``. Every
value comes back as its literal text, so callers re-interpret ``"true"`` or
``"42"`` themselves.

The decoder counts braces naively and toggles quote state on every ``"``
without looking at escapes. Escape sequences written by ``encode`` are not
decoded.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from taskboard.errors import CodecError


def encode(value: Any) -> str:
    """Encode ``value`` as compact JSON text, keeping insertion order."""
    if isinstance(value, Mapping):
        members = (
            encode(str(key)) + ":" + encode(item) for key, item in value.items()
        )
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(encode(item) for item in value) + "]"
    if isinstance(value, str):
        return '"' + _escape(value) + '"'
    # bool is an int subclass; check it first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return '"' + _escape(str(value)) + '"'


def _escape(text: str) -> str:
    # Carriage returns are dropped, not escaped.
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "")
    )


def decode_records(text: str, *, strict: bool = False) -> list[dict[str, str]]:
    """Decode a JSON array of flat objects into string-to-string mappings.

    Lenient mode returns whatever fully balanced objects precede a
    malformation, or ``[]`` when the document is not an array. Strict mode
    raises ``CodecError`` instead.
    """
    text = text.strip()
    if not text.startswith("["):
        if strict:
            raise CodecError(
                "NOT_AN_ARRAY",
                "Document must start with '['.",
                {"offset": 0},
            )
        return []

    records: list[dict[str, str]] = []
    position = 1
    while position < len(text):
        open_at = text.find("{", position)
        if open_at < 0:
            break
        close_at = _find_matching_brace(text, open_at)
        if close_at < 0:
            if strict:
                raise CodecError(
                    "UNBALANCED_OBJECT",
                    "Object is missing its closing brace.",
                    {"offset": open_at},
                )
            break
        body = text[open_at + 1 : close_at].strip()
        records.append(_parse_object(body, offset=open_at, strict=strict))
        position = close_at + 1
    return records


def _find_matching_brace(text: str, start: int) -> int:
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _parse_object(body: str, *, offset: int, strict: bool) -> dict[str, str]:
    if strict and body.count('"') % 2:
        raise CodecError(
            "UNTERMINATED_STRING",
            "Object contains an unterminated string.",
            {"offset": offset},
        )

    record: dict[str, str] = {}
    for part in _split_top_level(body, ","):
        pieces = _split_top_level(part, ":")
        if len(pieces) < 2:
            if strict and part.strip():
                raise CodecError(
                    "MISSING_COLON",
                    "Object member has no key/value separator.",
                    {"offset": offset, "member": part.strip()},
                )
            continue
        key = _trim_quotes(pieces[0])
        value = pieces[1].strip()
        if value.startswith('"'):
            value = _trim_quotes(value)
        record[key] = value
    return record


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split on ``separator`` outside double quotes; a trailing empty part is dropped."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == separator and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if current:
        parts.append("".join(current))
    return parts


def _trim_quotes(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text
