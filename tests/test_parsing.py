"""
Tests for structured-file parsing — every failure degrades to ABSENT.
"""

import pytest

from app.core.errors import ContentParseError
from app.core.parsing import (
    ABSENT,
    Absent,
    dependency_names,
    parse_json,
    parse_json_object,
    string_field,
)


def test_parses_json_object():
    assert parse_json_object('{"name": "demo", "version": "1.0"}') == {
        "name": "demo",
        "version": "1.0",
    }


@pytest.mark.parametrize("text", [None, "", "{not json", '{"name": "demo"', "[1, 2, 3]", '"just a string"', "42"])
def test_failures_degrade_to_absent(text):
    assert parse_json_object(text) is ABSENT


def test_absent_is_falsy_singleton():
    assert not ABSENT
    assert Absent() is ABSENT
    assert repr(ABSENT) == "ABSENT"


def test_parse_json_raises_named_error():
    with pytest.raises(ContentParseError):
        parse_json("{oops")
    with pytest.raises(ContentParseError, match="Expected a JSON object"):
        parse_json("[]")


def test_string_field():
    parsed = parse_json_object('{"name": "demo", "version": 3}')
    assert string_field(parsed, "name") == "demo"
    assert string_field(parsed, "version") == ""
    assert string_field(parsed, "missing") == ""
    assert string_field(ABSENT, "name") == ""


def test_dependency_names_lowercased():
    parsed = parse_json_object('{"dependencies": {"Firebase-Analytics": "1.0", "react": "18"}}')
    assert dependency_names(parsed) == ["firebase-analytics", "react"]


def test_dependency_names_tolerates_bad_shapes():
    assert dependency_names(ABSENT) == []
    assert dependency_names(parse_json_object('{"dependencies": ["react"]}')) == []
    assert dependency_names(parse_json_object('{"name": "x"}')) == []
