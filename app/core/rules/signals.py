"""
Shared signals for compliance rule predicates.

Keyword checks are case-insensitive substring searches over lower-cased file
text unless a predicate deliberately matches a case-sensitive platform key
(Info.plist, AndroidManifest.xml, Gradle files).
"""

from __future__ import annotations

from typing import Any, Iterable

from app.core.parsing import Absent
from app.models.snapshot import FileSnapshot

README = "README.md"
PACKAGE_JSON = "package.json"
APP_JSON = "app.json"
INFO_PLIST = "Info.plist"
ANDROID_MANIFEST = "AndroidManifest.xml"
EXTENSION_MANIFEST = "manifest.json"
PRIVACY_MANIFEST = "PrivacyInfo.xcprivacy"
TERMS = "TERMS.md"
COMMUNITY_GUIDELINES = "COMMUNITY_GUIDELINES.md"

PRIVACY_FILES = ("PRIVACY.md", "privacy-policy.md")
BUILD_GRADLE_FILES = ("build.gradle", "app/build.gradle")
NETWORK_CONFIG_FILES = ("network_security_config.xml", "res/xml/network_security_config.xml")
STRINGS_FILES = ("strings.xml", "res/values/strings.xml")

PLACEHOLDER_KEYWORDS = (
    "lorem ipsum",
    "placeholder",
    "your app name",
    "todo",
    "coming soon",
    "template",
)

PRIVACY_MIN_LENGTH = 200
README_MIN_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 20
APP_NAME_MAX_LENGTH = 30


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def any_contains(texts: Iterable[str], keywords: Iterable[str]) -> bool:
    """True if any keyword occurs in any of the texts."""
    keywords = tuple(keywords)
    return any(contains_any(text, keywords) for text in texts)


def has_placeholder(text: str, keywords: Iterable[str] = PLACEHOLDER_KEYWORDS) -> bool:
    return contains_any(text.lower(), keywords)


def is_substantive(text: str, min_length: int) -> bool:
    """Longer than ``min_length`` characters and free of placeholder keywords."""
    return len(text) > min_length and not has_placeholder(text)


def readme(snapshot: FileSnapshot) -> str:
    return snapshot.lower(README)


def privacy_file(snapshot: FileSnapshot) -> str | None:
    """Raw content of the first present privacy policy file."""
    return snapshot.first_present(*PRIVACY_FILES)


def privacy_text(snapshot: FileSnapshot) -> str:
    return (privacy_file(snapshot) or "").lower()


def first_text(snapshot: FileSnapshot, paths: Iterable[str]) -> str:
    return snapshot.first_present(*paths) or ""


def field_is_set(parsed: dict[str, Any] | Absent, key: str) -> bool:
    """Whether a manifest field holds a value (null, false, "" and 0 do not count)."""
    if isinstance(parsed, Absent):
        return False
    value = parsed.get(key)
    if value is None or isinstance(value, bool):
        return value is True
    return value not in ("", 0)


# ── Predicates shared across platforms ──


def missing_privacy_policy(snapshot: FileSnapshot) -> bool:
    """No privacy URL in the README and no substantive privacy policy file."""
    text = readme(snapshot)
    policy = privacy_file(snapshot)

    has_privacy_url = "privacy" in text and ("http://" in text or "https://" in text)

    # A privacy file that is a stub or a template counts as a violation on its own
    if policy and not is_substantive(policy, PRIVACY_MIN_LENGTH):
        return True

    return not has_privacy_url and not policy
