"""
Tests for FileSnapshot — absent vs empty, read-only mapping.
"""

import pytest

from app.models.snapshot import FileSnapshot


def test_absent_and_unfetched_read_the_same():
    snapshot = FileSnapshot({"README.md": "hello", "PRIVACY.md": None})
    assert snapshot.content("PRIVACY.md") is None
    assert snapshot.content("never-fetched.md") is None
    assert snapshot.text("PRIVACY.md") == ""
    assert snapshot.text("never-fetched.md") == ""


def test_empty_string_is_not_present():
    snapshot = FileSnapshot({"README.md": ""})
    assert snapshot.content("README.md") == ""
    assert not snapshot.is_present("README.md")
    assert snapshot.present_paths() == []


def test_lower_and_present_paths():
    snapshot = FileSnapshot({"README.md": "Hello World", "LICENSE": None})
    assert snapshot.lower("README.md") == "hello world"
    assert snapshot.present_paths() == ["README.md"]


def test_first_present_skips_absent_and_empty():
    snapshot = FileSnapshot({"PRIVACY.md": None, "privacy-policy.md": "", "TERMS.md": "terms"})
    assert snapshot.first_present("PRIVACY.md", "privacy-policy.md", "TERMS.md") == "terms"
    assert snapshot.first_present("PRIVACY.md") is None


def test_snapshot_is_read_only():
    files = {"README.md": "hello"}
    snapshot = FileSnapshot(files)
    with pytest.raises(TypeError):
        snapshot["README.md"] = "changed"
    files["README.md"] = "changed"
    assert snapshot["README.md"] == "hello"


def test_mapping_protocol():
    snapshot = FileSnapshot({"a": "1", "b": None})
    assert len(snapshot) == 2
    assert set(snapshot) == {"a", "b"}
    assert "b" in snapshot
    assert dict(snapshot) == {"a": "1", "b": None}
