"""
Structured-file parsing for rule predicates.

Predicates must never raise on malformed input. A JSON manifest that fails to
parse, or whose top level is not an object, is reported as ABSENT so the
predicate sees exactly what it would see if the file were missing.
"""

from __future__ import annotations

import json
from typing import Any

from app.core.errors import ContentParseError


class Absent:
    """Marker for a structured file that is missing or unparseable."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


def parse_json(text: str) -> dict[str, Any]:
    """Parse a JSON object or raise ContentParseError."""
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ContentParseError(f"Invalid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ContentParseError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def parse_json_object(text: str | None) -> dict[str, Any] | Absent:
    """Parse ``text`` as a JSON object, degrading every failure to ABSENT."""
    if not text:
        return ABSENT
    try:
        return parse_json(text)
    except ContentParseError:
        return ABSENT


def string_field(parsed: dict[str, Any] | Absent, key: str) -> str:
    """A string-valued field of a parsed object, or "" when missing or not a string."""
    if isinstance(parsed, Absent):
        return ""
    value = parsed.get(key)
    return value if isinstance(value, str) else ""


def dependency_names(parsed: dict[str, Any] | Absent) -> list[str]:
    """Keys of a package manifest's ``dependencies`` object, lower-cased."""
    if isinstance(parsed, Absent):
        return []
    deps = parsed.get("dependencies")
    if not isinstance(deps, dict):
        return []
    return [str(name).lower() for name in deps]
