"""
Chrome Web Store Rules — CWS-001 … CWS-007.

Every rule first decides whether the repository is a browser extension at
all; non-extensions never violate Chrome rules.
"""

from __future__ import annotations

import json

from app.core.parsing import Absent, parse_json_object
from app.core.rules.signals import (
    EXTENSION_MANIFEST,
    contains_any,
    field_is_set,
    privacy_file,
    readme,
)
from app.models.rule_models import ComplianceRule, Platform, Severity
from app.models.snapshot import FileSnapshot

MANIFEST_VERSION_KEY = '"manifest_version"'
MANIFEST_PLACEHOLDER_KEYWORDS = ("your extension name", "todo", "placeholder", "template")
BROAD_HOST_PERMISSIONS = ("<all_urls>", "http://*/*", "https://*/*", "activeTab", "tabs")


def _declares_manifest(snapshot: FileSnapshot) -> bool:
    return MANIFEST_VERSION_KEY in snapshot.text(EXTENSION_MANIFEST)


def _handles_user_data(snapshot: FileSnapshot, text: str) -> bool:
    return (
        '"permissions"' in snapshot.text(EXTENSION_MANIFEST)
        or "user data" in text
        or "personal information" in text
    )


def not_manifest_v3(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    manifest = parse_json_object(snapshot.content(EXTENSION_MANIFEST))
    # An unparseable manifest is treated exactly like a missing one
    manifest_text = "" if isinstance(manifest, Absent) else snapshot.text(EXTENSION_MANIFEST)

    is_extension = (
        MANIFEST_VERSION_KEY in manifest_text
        or "chrome extension" in text
        or "browser extension" in text
    )
    if not is_extension:
        return False

    if not isinstance(manifest, Absent):
        version = manifest.get("manifest_version")
        is_v3 = not isinstance(version, bool) and version == 3
        serialized = json.dumps(manifest, separators=(",", ":"), ensure_ascii=False).lower()
        has_placeholder = contains_any(serialized, MANIFEST_PLACEHOLDER_KEYWORDS)
        has_required_fields = all(
            field_is_set(manifest, key) for key in ("name", "version", "description")
        )
        return not is_v3 or has_placeholder or not has_required_fields

    return "manifest v3" not in text and "manifest version 3" not in text


def lacks_single_purpose(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    if not (_declares_manifest(snapshot) or "chrome extension" in text):
        return False
    documents_purpose = contains_any(
        text, ("single purpose", "main function", "primary feature", "core functionality")
    )
    bundles_features = contains_any(text, ("and also", "additionally", "plus", "bundled with"))
    return not documents_purpose or bundles_features


def extension_missing_privacy_policy(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    if not (_declares_manifest(snapshot) or "chrome extension" in text):
        return False
    has_policy = bool(privacy_file(snapshot)) or contains_any(
        text, ("privacy policy", "privacy.html")
    )
    return _handles_user_data(snapshot, text) and not has_policy


def excessive_permissions(snapshot: FileSnapshot) -> bool:
    if not _declares_manifest(snapshot):
        return False
    manifest = snapshot.text(EXTENSION_MANIFEST)
    has_broad_permissions = any(permission in manifest for permission in BROAD_HOST_PERMISSIONS)
    justified = contains_any(
        readme(snapshot), ("permission", "access", "necessary", "required for")
    )
    return has_broad_permissions and not justified


def obfuscated_code(snapshot: FileSnapshot) -> bool:
    if not _declares_manifest(snapshot):
        return False
    text = readme(snapshot)
    obfuscated = contains_any(text, ("obfuscated", "minified", "compressed", "encoded"))
    readable = contains_any(
        text, ("readable code", "source code", "unminified", "clear logic")
    )
    return obfuscated and not readable


def deceptive_listing(snapshot: FileSnapshot) -> bool:
    if not _declares_manifest(snapshot):
        return False
    text = readme(snapshot)
    deceptive = contains_any(
        text, ("fake", "impersonate", "misleading", "trick users", "disguise")
    )
    transparent = contains_any(
        text, ("honest", "transparent", "clear description", "accurate")
    )
    return deceptive or not transparent


def insecure_data_handling(snapshot: FileSnapshot) -> bool:
    if not _declares_manifest(snapshot):
        return False
    text = readme(snapshot)
    documents_security = contains_any(text, ("https", "encryption", "secure", "tls", "ssl"))
    insecure_practices = contains_any(text, ("http://", "unencrypted", "plain text"))
    return _handles_user_data(snapshot, text) and (
        not documents_security or insecure_practices
    )


def _rule(
    rule_id: str,
    severity: Severity,
    category: str,
    description: str,
    check,
    solution: str,
    required_files: tuple[str, ...],
) -> ComplianceRule:
    return ComplianceRule(
        rule_id=rule_id,
        platform=Platform.CHROME_WEB_STORE,
        severity=severity,
        category=category,
        description=description,
        check=check,
        static_solution=solution,
        required_files=required_files,
    )


RULES: tuple[ComplianceRule, ...] = (
    _rule(
        "CWS-001",
        Severity.HIGH,
        "Manifest V3 Compliance",
        "New Chrome extensions must use Manifest V3. Manifest V2 extensions are deprecated and "
        "will not be accepted for new submissions.",
        not_manifest_v3,
        "Update your extension to use Manifest V3. Migrate from Manifest V2 APIs to their V3 "
        "equivalents and update your manifest.json file.",
        ("manifest.json", "README.md"),
    ),
    _rule(
        "CWS-002",
        Severity.HIGH,
        "Single Purpose",
        "Extensions must have a single, narrow, and easy-to-understand purpose. Bundling "
        "unrelated functionality is prohibited.",
        lacks_single_purpose,
        "Focus your extension on a single, clear purpose. Remove unrelated features and document "
        "the primary function clearly in your README.",
        ("README.md", "manifest.json"),
    ),
    _rule(
        "CWS-003",
        Severity.HIGH,
        "Privacy Policy",
        "Extensions that handle user data must have an accurate and up-to-date privacy policy "
        "that discloses data collection, use, and sharing practices.",
        extension_missing_privacy_policy,
        "Create a comprehensive privacy policy that details all data collection practices. Host "
        "it online and link to it in your extension and store listing.",
        ("manifest.json", "README.md", "PRIVACY.md"),
    ),
    _rule(
        "CWS-004",
        Severity.MEDIUM,
        "Excessive Permissions",
        "Extensions should only request permissions necessary for their stated purpose. "
        "Excessive or unjustified permissions violate Chrome Web Store policies.",
        excessive_permissions,
        "Review and minimize permissions in manifest.json. Document why each permission is "
        "necessary for your extension's core functionality.",
        ("manifest.json", "README.md"),
    ),
    _rule(
        "CWS-005",
        Severity.MEDIUM,
        "Code Readability",
        "Extension code must not be obfuscated or conceal functionality. While minification is "
        "allowed, the logic must be discernible.",
        obfuscated_code,
        "Ensure your code is readable and logic is discernible. If using minification, provide "
        "clear documentation about your extension's functionality.",
        ("README.md", "manifest.json"),
    ),
    _rule(
        "CWS-006",
        Severity.HIGH,
        "Honest and Transparent",
        "Extensions and their store listings must not be misleading or deceptive. All "
        "functionality must be clearly stated and honest.",
        deceptive_listing,
        "Ensure all descriptions, screenshots, and functionality are accurate and honest. Remove "
        "any misleading claims or deceptive practices.",
        ("README.md", "manifest.json"),
    ),
    _rule(
        "CWS-007",
        Severity.HIGH,
        "Secure Data Handling",
        "User data must be handled securely with modern cryptography (HTTPS). Extensions must "
        "not transmit data insecurely.",
        insecure_data_handling,
        "Use HTTPS for all data transmission. Implement proper encryption for sensitive data and "
        "document your security practices.",
        ("README.md", "manifest.json"),
    ),
)
