"""
Google Play Store Rules — GPS-001 … GPS-011.

GPS-001 shares its predicate with AAS-001. Gradle, manifest and resource
files are matched case-sensitively against their platform keys.
"""

from __future__ import annotations

from app.core.parsing import parse_json_object
from app.core.rules.signals import (
    ANDROID_MANIFEST,
    APP_JSON,
    BUILD_GRADLE_FILES,
    INFO_PLIST,
    NETWORK_CONFIG_FILES,
    STRINGS_FILES,
    any_contains,
    contains_any,
    field_is_set,
    first_text,
    missing_privacy_policy,
    privacy_text,
    readme,
)
from app.models.rule_models import ComplianceRule, Platform, Severity
from app.models.snapshot import FileSnapshot

OUTDATED_SDK_MARKERS = (
    "api 30",
    "api 31",
    "api 32",
    "api 33",
    "targetsdkversion 30",
    "targetsdkversion 31",
)
DANGEROUS_PERMISSIONS = (
    "READ_CONTACTS",
    "WRITE_CONTACTS",
    "READ_SMS",
    "SEND_SMS",
    "READ_CALL_LOG",
    "CAMERA",
    "RECORD_AUDIO",
    "ACCESS_FINE_LOCATION",
    "ACCESS_COARSE_LOCATION",
    "READ_EXTERNAL_STORAGE",
    "WRITE_EXTERNAL_STORAGE",
)


def missing_data_safety_section(snapshot: FileSnapshot) -> bool:
    return not any_contains(
        (readme(snapshot), privacy_text(snapshot)),
        ("data safety", "data security", "data protection", "secure data"),
    )


def undocumented_permissions(snapshot: FileSnapshot) -> bool:
    requests_permissions = (
        "permission" in snapshot.text(ANDROID_MANIFEST) or "Usage" in snapshot.text(INFO_PLIST)
    )
    documented = contains_any(readme(snapshot), ("permission", "access"))
    return requests_permissions and not documented


def missing_content_rating(snapshot: FileSnapshot) -> bool:
    app = parse_json_object(snapshot.content(APP_JSON))
    has_rating = field_is_set(app, "contentRating") or field_is_set(app, "rating")
    has_rating_in_readme = contains_any(readme(snapshot), ("rating", "age", "mature"))
    return not has_rating and not has_rating_in_readme


def outdated_target_sdk(snapshot: FileSnapshot) -> bool:
    gradle = first_text(snapshot, BUILD_GRADLE_FILES)
    text = readme(snapshot)
    has_target_sdk = "targetSdkVersion" in gradle or "targetSdk" in gradle
    has_target_sdk_doc = "target sdk" in text or "api level" in text
    has_outdated_sdk = any_contains((gradle.lower(), text), OUTDATED_SDK_MARKERS)
    return (not has_target_sdk and not has_target_sdk_doc) or has_outdated_sdk


def insecure_network_config(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_network_config = bool(
        snapshot.first_present(*NETWORK_CONFIG_FILES)
    ) or "networkSecurityConfig" in snapshot.text(ANDROID_MANIFEST)
    documented = contains_any(text, ("network security", "https", "tls", "ssl"))
    uses_plain_http = "http://" in text and "https://" not in text
    return (not has_network_config and not documented) or uses_plain_http


def undeclared_foreground_service(snapshot: FileSnapshot) -> bool:
    manifest = snapshot.text(ANDROID_MANIFEST)
    has_foreground_service = (
        "android:foregroundServiceType" in manifest or "FOREGROUND_SERVICE" in manifest
    )
    documented = contains_any(
        readme(snapshot), ("foreground service", "background service", "service type")
    )
    return has_foreground_service and not documented


def non_play_billing(snapshot: FileSnapshot) -> bool:
    gradle = first_text(snapshot, BUILD_GRADLE_FILES)
    text = readme(snapshot)
    has_billing = (
        "play-services-billing" in gradle
        or "billing" in gradle
        or contains_any(text, ("purchase", "subscription", "premium"))
    )
    has_external_payment = contains_any(
        text, ("paypal", "stripe", "external payment", "bypass billing")
    )
    has_play_billing = contains_any(
        text, ("play billing", "google play billing", "billing library")
    )
    return has_billing and (has_external_payment or not has_play_billing)


def missing_data_deletion(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_deletion = any_contains(
        (text, privacy_text(snapshot)),
        ("delete account", "data deletion", "remove data", "account deletion"),
    )
    collects_data = contains_any(text, ("user data", "personal information", "account", "profile"))
    return collects_data and not has_deletion


def exposed_api_keys(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    strings = first_text(snapshot, STRINGS_FILES)
    gradle = first_text(snapshot, BUILD_GRADLE_FILES)

    uses_api_keys = (
        "api_key" in strings or "API_KEY" in strings or "api_key" in gradle or "api key" in text
    )
    documents_key_security = contains_any(
        text, ("api key security", "secure keys", "encrypted keys", "key protection")
    )
    # Google ("AIza") and Stripe ("sk_") key prefixes
    has_hardcoded_keys = "AIza" in strings or "sk_" in strings or "AIza" in gradle
    return uses_api_keys and (not documents_key_security or has_hardcoded_keys)


def unjustified_dangerous_permissions(snapshot: FileSnapshot) -> bool:
    manifest = snapshot.text(ANDROID_MANIFEST)
    has_dangerous = any(permission in manifest for permission in DANGEROUS_PERMISSIONS)
    justified = contains_any(
        readme(snapshot), ("permission", "access", "runtime permission", "user consent")
    )
    return has_dangerous and not justified


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
        platform=Platform.GOOGLE_PLAY_STORE,
        severity=severity,
        category=category,
        description=description,
        check=check,
        static_solution=solution,
        required_files=required_files,
    )


RULES: tuple[ComplianceRule, ...] = (
    _rule(
        "GPS-001",
        Severity.HIGH,
        "Privacy Policy",
        "No privacy policy link is provided. Google Play Store requires all apps that collect "
        "user data to have a publicly accessible privacy policy.",
        missing_privacy_policy,
        "Create and host a privacy policy online, then add the URL to your app's Play Store "
        "listing and within the app itself.",
        ("README.md", "PRIVACY.md"),
    ),
    _rule(
        "GPS-002",
        Severity.HIGH,
        "Data Safety Section",
        "Missing or incomplete Data Safety section information. Google Play requires detailed "
        "disclosure of data collection and sharing practices.",
        missing_data_safety_section,
        "Complete the Data Safety section in Google Play Console, declaring all data "
        "collection, usage, and sharing practices. Document these practices in your repository.",
        ("README.md", "PRIVACY.md"),
    ),
    _rule(
        "GPS-003",
        Severity.MEDIUM,
        "Permissions Documentation",
        "The app requests permissions but does not clearly document why each permission is "
        "needed. Google Play guidelines require justification for all permissions.",
        undocumented_permissions,
        "Document each permission your app requests in the README.md, explaining why it's "
        "necessary and how it's used.",
        ("README.md", "AndroidManifest.xml"),
    ),
    _rule(
        "GPS-004",
        Severity.MEDIUM,
        "Content Rating",
        "No content rating information is provided. Google Play requires all apps to have an "
        "appropriate content rating.",
        missing_content_rating,
        "Complete the content rating questionnaire in Google Play Console and document the "
        "rating in your app metadata.",
        ("README.md", "app.json"),
    ),
    _rule(
        "GPS-005",
        Severity.HIGH,
        "Target SDK Compliance",
        "App target SDK version is too low or outdated. Google requires apps to target recent "
        "API levels to ensure security and privacy features are enabled.",
        outdated_target_sdk,
        "Update your targetSdkVersion in build.gradle to meet Google's current requirements "
        "(API 34+ as of 2024). Document your target SDK version in README.md.",
        ("build.gradle", "app/build.gradle", "README.md"),
    ),
    _rule(
        "GPS-006",
        Severity.HIGH,
        "Network Security",
        "Missing network security configuration or insecure HTTP usage. Google requires secure "
        "network connections and proper TLS configuration.",
        insecure_network_config,
        "Implement Network Security Configuration, use HTTPS for all network requests, and "
        "document your security practices. Avoid plain HTTP connections.",
        ("network_security_config.xml", "AndroidManifest.xml", "README.md"),
    ),
    _rule(
        "GPS-007",
        Severity.MEDIUM,
        "Foreground Service",
        "Apps using foreground services must properly declare service types and justify their "
        "usage. Improper foreground service use violates Google Play policies.",
        undeclared_foreground_service,
        "Properly declare android:foregroundServiceType in your manifest and document why your "
        "app needs foreground services. Ensure service types match actual functionality.",
        ("AndroidManifest.xml", "README.md"),
    ),
    _rule(
        "GPS-008",
        Severity.HIGH,
        "Play Billing Compliance",
        "Apps with digital purchases must use Google Play Billing. External payment systems for "
        "digital goods violate Google Play policies.",
        non_play_billing,
        "Use Google Play Billing Library for all digital purchases and subscriptions. Remove "
        "any external payment systems for digital content. Document your billing implementation.",
        ("build.gradle", "README.md"),
    ),
    _rule(
        "GPS-009",
        Severity.MEDIUM,
        "Data Deletion",
        "Apps collecting user data must provide a way for users to delete their accounts and "
        "data. Google requires clear data deletion mechanisms.",
        missing_data_deletion,
        "Implement and document a clear account deletion feature within your app. Provide users "
        "with an easy way to delete their data and accounts.",
        ("README.md", "PRIVACY.md"),
    ),
    _rule(
        "GPS-010",
        Severity.HIGH,
        "API Key Security",
        "API keys must be properly secured and not hardcoded in the app. Exposed API keys create "
        "security vulnerabilities and policy violations.",
        exposed_api_keys,
        "Store API keys securely using encrypted storage or build-time injection. Remove "
        "hardcoded keys from strings.xml and source code. Document your key security practices.",
        ("strings.xml", "build.gradle", "README.md"),
    ),
    _rule(
        "GPS-011",
        Severity.HIGH,
        "Dangerous Permissions",
        "Apps requesting dangerous permissions must provide clear justification and obtain "
        "proper user consent. Undisclosed sensitive data collection violates privacy policies.",
        unjustified_dangerous_permissions,
        "Document why your app needs each dangerous permission and implement runtime permission "
        "requests with clear explanations. Ensure user consent before accessing sensitive data.",
        ("AndroidManifest.xml", "README.md"),
    ),
)
