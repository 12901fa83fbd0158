"""
Test fixtures shared across all StoreCheck tests.
"""

import asyncio
import os

# Settings() requires the key at import time
os.environ.setdefault("GROQ_API_KEY", "test-key")

import pytest

from app.models.snapshot import FileSnapshot


class FakeGenerator:
    """AIGenerator double. ``respond(model, prompt)`` returns text or an exception to raise."""

    def __init__(self, respond=None, delay: float = 0.0):
        self.respond = respond or (lambda model, prompt: "{}")
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.respond(model, prompt)
        if isinstance(result, Exception):
            raise result
        return result


class FakeFetcher:
    """FileFetcher double serving a fixed dict; unknown paths are missing."""

    def __init__(self, files=None, error: Exception | None = None):
        self.files = files or {}
        self.error = error
        self.requested: list[str] = []

    async def fetch_file(self, owner, repo, path, branch=None):
        self.requested.append(path)
        if self.error is not None:
            raise self.error
        return self.files.get(path)


@pytest.fixture
def make_generator():
    return FakeGenerator


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def empty_snapshot():
    return FileSnapshot({})


@pytest.fixture
def mobile_app_files():
    """A reasonably complete mobile app repository."""
    return {
        "README.md": (
            "# Trailmate\n\n"
            "Trailmate is a native hiking companion with offline maps and GPS navigation.\n\n"
            "## Features\n"
            "- Offline trail maps\n"
            "- Location tracking while the app is open\n\n"
            "Privacy policy: https://trailmate.example.com/privacy\n"
            "Support: support@trailmate.example.com\n"
        ),
        "PRIVACY.md": (
            "# Privacy Policy\n\n"
            "Trailmate does not sell personal information. We describe our data collection "
            "below: location data is processed on-device to draw your position on the map and "
            "is never uploaded. Crash reports are sent only with your consent. Contact "
            "privacy@trailmate.example.com with any questions about this policy.\n"
        ),
        "package.json": '{"name": "trailmate", "author": "Trailmate Ltd", "dependencies": {"react-native": "0.74.0"}}',
        "Info.plist": "<key>NSLocationWhenInUseUsageDescription</key><string>Show your position</string>",
    }


@pytest.fixture
def mobile_app_snapshot(mobile_app_files):
    return FileSnapshot(mobile_app_files)
