"""
File Snapshot — Immutable per-run view of repository file contents.

Maps canonical relative paths to their text, or to None when the file is
absent. None is the absent marker; an empty string is a present, empty file.
Paths that were never fetched read as absent.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType


class FileSnapshot(Mapping[str, str | None]):
    """Read-only mapping of path -> content (None = absent)."""

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, str | None] | None = None) -> None:
        self._files = MappingProxyType(dict(files or {}))

    def __getitem__(self, path: str) -> str | None:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"FileSnapshot(present={self.present_paths()!r})"

    def content(self, path: str) -> str | None:
        """Raw content, or None when absent or never fetched."""
        return self._files.get(path)

    def text(self, path: str) -> str:
        """Content with absent read as the empty string."""
        return self._files.get(path) or ""

    def lower(self, path: str) -> str:
        return self.text(path).lower()

    def is_present(self, path: str) -> bool:
        """True when the file exists and has non-empty content."""
        return bool(self._files.get(path))

    def first_present(self, *paths: str) -> str | None:
        """Content of the first present path among ``paths``."""
        for path in paths:
            content = self._files.get(path)
            if content:
                return content
        return None

    def present_paths(self) -> list[str]:
        return [path for path, content in self._files.items() if content]
