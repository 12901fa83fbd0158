"""
Apple App Store Rules — AAS-001 … AAS-024.

Each predicate returns True when the snapshot violates the rule.
"""

from __future__ import annotations

from app.core.parsing import dependency_names, parse_json_object, string_field
from app.core.rules.signals import (
    APP_JSON,
    APP_NAME_MAX_LENGTH,
    COMMUNITY_GUIDELINES,
    DESCRIPTION_MIN_LENGTH,
    INFO_PLIST,
    PACKAGE_JSON,
    PRIVACY_MANIFEST,
    README,
    README_MIN_LENGTH,
    TERMS,
    any_contains,
    contains_any,
    field_is_set,
    has_placeholder,
    is_substantive,
    missing_privacy_policy,
    privacy_text,
    readme,
)
from app.models.rule_models import ComplianceRule, Platform, Severity
from app.models.snapshot import FileSnapshot

DATA_COLLECTION_KEYWORDS = ("data collection", "collect data", "user data", "personal information")
TRACKING_LIBRARIES = ("firebase", "analytics", "mixpanel", "amplitude", "segment")
CONTACT_KEYWORDS = ("contact", "support", "email", "@", "help")
MODERATION_KEYWORDS = (
    "content moderation",
    "report content",
    "block user",
    "filter content",
    "user reporting",
)
UGC_KEYWORDS = ("user content", "user posts", "comments", "reviews", "social", "chat", "messaging")
SENSITIVE_USAGE_KEYS = (
    "NSCameraUsageDescription",
    "NSPhotoLibraryUsageDescription",
    "NSMicrophoneUsageDescription",
    "NSLocationWhenInUseUsageDescription",
    "NSLocationAlwaysAndWhenInUseUsageDescription",
    "NSContactsUsageDescription",
    "NSCalendarsUsageDescription",
)


def missing_data_collection_disclosure(snapshot: FileSnapshot) -> bool:
    return not any_contains((readme(snapshot), privacy_text(snapshot)), DATA_COLLECTION_KEYWORDS)


def _manifest_description_ok(text: str | None) -> bool:
    description = string_field(parse_json_object(text), "description")
    return len(description) > DESCRIPTION_MIN_LENGTH and not has_placeholder(description)


def missing_app_description(snapshot: FileSnapshot) -> bool:
    has_readme_content = is_substantive(snapshot.text(README), README_MIN_LENGTH)
    has_json_description = _manifest_description_ok(
        snapshot.content(APP_JSON)
    ) or _manifest_description_ok(snapshot.content(PACKAGE_JSON))
    return not has_readme_content and not has_json_description


def undisclosed_third_party_sdks(snapshot: FileSnapshot) -> bool:
    deps = dependency_names(parse_json_object(snapshot.content(PACKAGE_JSON)))
    has_tracking_deps = any(contains_any(dep, TRACKING_LIBRARIES) for dep in deps)
    has_disclosure = any_contains(
        (readme(snapshot), privacy_text(snapshot)), ("third-party", "third party")
    )
    return has_tracking_deps and not has_disclosure


def missing_developer_contact(snapshot: FileSnapshot) -> bool:
    package = parse_json_object(snapshot.content(PACKAGE_JSON))
    bugs = package.get("bugs") if isinstance(package, dict) else None
    has_contact_in_package = (
        field_is_set(package, "author")
        or field_is_set(package, "maintainers")
        or (isinstance(bugs, dict) and field_is_set(bugs, "url"))
        or field_is_set(package, "homepage")
    )
    return not contains_any(readme(snapshot), CONTACT_KEYWORDS) and not has_contact_in_package


def missing_app_name(snapshot: FileSnapshot) -> bool:
    app_name = string_field(parse_json_object(snapshot.content(APP_JSON)), "name")
    if 0 < len(app_name) <= APP_NAME_MAX_LENGTH:
        return False
    package_name = string_field(parse_json_object(snapshot.content(PACKAGE_JSON)), "name")
    return not package_name


def missing_privacy_manifest(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    documented = "privacy manifest" in text or "privacyinfo.xcprivacy" in text
    return not snapshot.is_present(PRIVACY_MANIFEST) and not documented


def unmoderated_user_content(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_moderation = any_contains(
        (text, snapshot.lower(TERMS), snapshot.lower(COMMUNITY_GUIDELINES)),
        MODERATION_KEYWORDS,
    )
    return contains_any(text, UGC_KEYWORDS) and not has_moderation


def missing_transport_security(snapshot: FileSnapshot) -> bool:
    plist = snapshot.text(INFO_PLIST)
    has_ats_config = "NSAppTransportSecurity" in plist or "NSAllowsArbitraryLoads" in plist
    documented = contains_any(readme(snapshot), ("app transport security", "https", "tls"))
    return not has_ats_config and not documented


def _purchase_dependencies(snapshot: FileSnapshot, markers: tuple[str, ...]) -> bool:
    deps = dependency_names(parse_json_object(snapshot.content(PACKAGE_JSON)))
    return any(contains_any(dep, markers) for dep in deps)


def missing_subscription_terms(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_subscriptions = _purchase_dependencies(
        snapshot, ("subscription", "billing", "payment")
    ) or contains_any(text, ("subscription", "auto-renew", "billing", "premium"))
    has_terms = any_contains(
        (text, snapshot.lower(TERMS)),
        ("subscription terms", "auto-renewal", "cancellation", "refund policy"),
    )
    return has_subscriptions and not has_terms


def missing_restore_purchases(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_iap = _purchase_dependencies(
        snapshot, ("purchase", "billing", "payment")
    ) or contains_any(text, ("in-app purchase", "premium features", "unlock", "subscription"))
    has_restore = contains_any(
        text, ("restore purchase", "restore subscription", "restore premium")
    )
    return has_iap and not has_restore


def missing_age_rating(snapshot: FileSnapshot) -> bool:
    app = parse_json_object(snapshot.content(APP_JSON))
    has_rating = field_is_set(app, "contentRating") or field_is_set(app, "ageRating")
    has_rating_in_readme = contains_any(
        readme(snapshot), ("age rating", "4+", "9+", "12+", "17+", "mature content")
    )
    return not has_rating and not has_rating_in_readme


def unjustified_background_modes(snapshot: FileSnapshot) -> bool:
    has_background_modes = "UIBackgroundModes" in snapshot.text(INFO_PLIST)
    justified = contains_any(
        readme(snapshot),
        ("background", "voip", "location", "audio playback", "push notification"),
    )
    return has_background_modes and not justified


def undocumented_location_usage(snapshot: FileSnapshot) -> bool:
    plist = snapshot.text(INFO_PLIST)
    requests_location = (
        "NSLocationWhenInUseUsageDescription" in plist
        or "NSLocationAlwaysAndWhenInUseUsageDescription" in plist
    )
    documented = contains_any(
        readme(snapshot), ("location", "gps", "maps", "navigation", "geolocation")
    )
    return requests_location and not documented


def undocumented_camera_usage(snapshot: FileSnapshot) -> bool:
    requests_camera = "NSCameraUsageDescription" in snapshot.text(INFO_PLIST)
    documented = contains_any(
        readme(snapshot), ("camera", "photo", "video", "capture", "ar", "augmented reality")
    )
    return requests_camera and not documented


def lacks_minimum_functionality(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_functionality = contains_any(
        text, ("features", "functionality", "interactive", "native", "offline")
    )
    is_web_wrapper = contains_any(text, ("webview", "web app", "website wrapper", "browser"))
    return not has_functionality or is_web_wrapper


def incomplete_app(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_placeholders = contains_any(
        text, ("coming soon", "placeholder", "todo", "under construction", "beta", "demo only")
    )
    has_incomplete_features = contains_any(
        text, ("not implemented", "work in progress", "wip", "incomplete")
    )
    return has_placeholders or has_incomplete_features


def tracking_without_att(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    tracks_users = "NSUserTrackingUsageDescription" in snapshot.text(INFO_PLIST) or contains_any(
        text, ("idfa", "tracking", "advertising identifier")
    )
    uses_att = contains_any(
        text, ("app tracking transparency", "att framework", "requesttrackingauthorization")
    )
    return tracks_users and not uses_att


def social_login_without_apple(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_social_login = contains_any(
        text, ("google sign in", "facebook login", "twitter login", "social login", "oauth")
    )
    deps = dependency_names(parse_json_object(snapshot.content(PACKAGE_JSON)))
    has_third_party_auth = any(contains_any(dep, ("google", "facebook", "auth")) for dep in deps)
    has_apple_sign_in = contains_any(
        text, ("sign in with apple", "apple authentication", "authenticationservices")
    )
    return (has_social_login or has_third_party_auth) and not has_apple_sign_in


def missing_account_deletion(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_accounts = contains_any(text, ("account", "sign up", "registration", "user profile"))
    has_deletion = contains_any(
        text, ("delete account", "account deletion", "remove account", "deactivate account")
    )
    return has_accounts and not has_deletion


def missing_usage_descriptions(snapshot: FileSnapshot) -> bool:
    plist = snapshot.text(INFO_PLIST)
    has_sensitive = any(key in plist for key in SENSITIVE_USAGE_KEYS)
    documented = contains_any(readme(snapshot), ("usage description", "permission", "access"))
    return has_sensitive and not documented


def uses_non_public_apis(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    mentions_private = contains_any(
        text, ("private api", "undocumented", "internal api", "non-public")
    )
    mentions_public = contains_any(text, ("public api", "official sdk", "documented api"))
    return mentions_private and not mentions_public


def downloads_executable_code(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    downloads_code = contains_any(
        text, ("download code", "dynamic loading", "runtime code", "executable download")
    )
    legitimate = contains_any(text, ("webview", "javascript", "web content"))
    return downloads_code and not legitimate


def misleading_subscription_ux(snapshot: FileSnapshot) -> bool:
    text = readme(snapshot)
    has_subscriptions = contains_any(text, ("subscription", "premium", "auto-renew"))
    transparent = contains_any(
        text, ("clear pricing", "subscription terms", "cancellation", "trial period")
    )
    misleading = contains_any(text, ("hidden fee", "automatic charge", "difficult to cancel"))
    return has_subscriptions and (not transparent or misleading)


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
        platform=Platform.APPLE_APP_STORE,
        severity=severity,
        category=category,
        description=description,
        check=check,
        static_solution=solution,
        required_files=required_files,
    )


RULES: tuple[ComplianceRule, ...] = (
    _rule(
        "AAS-001",
        Severity.HIGH,
        "Privacy Policy",
        "No publicly accessible privacy policy URL is mentioned or provided in the repository "
        "files. A privacy policy is a mandatory requirement for all apps submitted to the Apple "
        "App Store (App Store Review Guideline 5.1.1).",
        missing_privacy_policy,
        "Create a comprehensive privacy policy document, host it online at a stable URL, and "
        "include this URL prominently in the app's metadata on App Store Connect and within the "
        "app itself. The policy should detail data collection, usage, and sharing practices.",
        ("README.md", "PRIVACY.md", "privacy-policy.md"),
    ),
    _rule(
        "AAS-002",
        Severity.HIGH,
        "Data Collection Disclosure",
        "No explicit disclosure regarding what specific user data is collected, how it's used, "
        "stored, or whether any of it is transmitted off-device or shared with third parties. "
        "This detailed disclosure is required for App Store Connect's privacy manifest (App "
        "Store Review Guideline 5.1.1, 5.1.2).",
        missing_data_collection_disclosure,
        "Implement a comprehensive privacy policy that clearly outlines all data collection "
        "practices, including what data is collected, why it's collected, how it's used, "
        "whether it's stored locally or transmitted, and if it's shared with any third parties.",
        ("README.md", "PRIVACY.md"),
    ),
    _rule(
        "AAS-003",
        Severity.MEDIUM,
        "App Description",
        "The app lacks a clear, comprehensive description of its functionality. App Store "
        "guidelines require accurate and detailed descriptions of app features.",
        missing_app_description,
        "Add a detailed description in your README.md and app.json/package.json that clearly "
        "explains what your app does, its main features, and how users interact with it.",
        ("README.md", "app.json", "package.json"),
    ),
    _rule(
        "AAS-004",
        Severity.MEDIUM,
        "Third-party SDK Disclosure",
        "The app appears to use third-party SDKs or libraries but does not disclose their data "
        "collection practices. Apple requires disclosure of all third-party data collection.",
        undisclosed_third_party_sdks,
        "Document all third-party SDKs and libraries used in your app, and disclose their data "
        "collection practices in your privacy policy.",
        ("package.json", "README.md", "PRIVACY.md"),
    ),
    _rule(
        "AAS-005",
        Severity.MEDIUM,
        "Developer Information",
        "Apps must include accurate and up-to-date contact information so users can reach you "
        "with questions and support issues (App Store Review Guideline 1.5).",
        missing_developer_contact,
        "Add contact information to your README.md and package.json, including email, support "
        "URL, or other ways for users to reach you for support.",
        ("README.md", "package.json"),
    ),
    _rule(
        "AAS-006",
        Severity.MEDIUM,
        "App Name",
        "App name is missing or exceeds the 30-character limit. App names must be unique and "
        "limited to 30 characters (App Store Review Guideline 2.3.7).",
        missing_app_name,
        "Choose a unique app name that is 30 characters or less and add it to your app.json or "
        "package.json file.",
        ("app.json", "package.json"),
    ),
    _rule(
        "AAS-007",
        Severity.HIGH,
        "Privacy Manifest",
        "Missing privacy manifest file (PrivacyInfo.xcprivacy). Starting May 1, 2024, all iOS "
        "apps must include a privacy manifest that outlines data collection and API usage.",
        missing_privacy_manifest,
        "Create a PrivacyInfo.xcprivacy file using Xcode 15 or later (File > New > File > App "
        "Privacy File) and declare all APIs, data types, and tracking domains used by your app.",
        ("PrivacyInfo.xcprivacy", "README.md"),
    ),
    _rule(
        "AAS-008",
        Severity.HIGH,
        "User-Generated Content",
        "Apps with user-generated content must include content moderation features: filtering "
        "objectionable material, reporting mechanisms, and user blocking capabilities (App "
        "Store Review Guideline 1.2).",
        unmoderated_user_content,
        "Implement and document content moderation features including: a method for filtering "
        "objectionable content, a mechanism to report offensive content, and the ability to "
        "block abusive users.",
        ("README.md", "TERMS.md", "COMMUNITY_GUIDELINES.md"),
    ),
    _rule(
        "AAS-009",
        Severity.HIGH,
        "App Transport Security",
        "Missing App Transport Security (ATS) configuration. Apple requires secure network "
        "connections using TLS 1.2 or higher (App Store Review Guideline 1.6).",
        missing_transport_security,
        "Configure App Transport Security in your Info.plist file and document your security "
        "practices. Use HTTPS for all network connections and implement SSL pinning where "
        "appropriate.",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-010",
        Severity.MEDIUM,
        "Subscription Terms",
        "Apps offering subscriptions must clearly describe subscription terms, pricing, and "
        "auto-renewal details before purchase (App Store Review Guideline 3.1.2).",
        missing_subscription_terms,
        "Document subscription terms including pricing, duration, auto-renewal details, and "
        "cancellation policy. Make this information easily accessible to users before they "
        "subscribe.",
        ("README.md", "TERMS.md"),
    ),
    _rule(
        "AAS-011",
        Severity.MEDIUM,
        "Restore Purchases",
        'Apps with non-consumable in-app purchases or subscriptions must provide a "Restore '
        'Purchases" mechanism (App Store Review Guideline 3.1.1).',
        missing_restore_purchases,
        'Implement and document a "Restore Purchases" feature that allows users to restore '
        "their previous purchases when reinstalling the app or switching devices.",
        ("README.md", "package.json"),
    ),
    _rule(
        "AAS-012",
        Severity.MEDIUM,
        "Age Rating",
        "Apps must have an appropriate age rating that accurately reflects the content. Answer "
        "age rating questions honestly in App Store Connect (App Store Review Guideline 2.3.6).",
        missing_age_rating,
        "Set an appropriate age rating (4+, 9+, 12+, or 17+) in your app.json and document any "
        "mature content or features that affect the rating.",
        ("app.json", "README.md"),
    ),
    _rule(
        "AAS-013",
        Severity.MEDIUM,
        "Background Modes",
        "Apps using background modes must justify their usage and use them only for their "
        "intended purposes (App Store Review Guideline 2.5.4).",
        unjustified_background_modes,
        "Document why your app needs background modes and ensure they are used only for their "
        "intended purposes (VoIP, audio playback, location, task completion, etc.).",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-014",
        Severity.MEDIUM,
        "Location Usage",
        "Apps requesting location access must clearly explain why location data is needed and "
        "how it will be used (App Store Review Guideline 5.1.1).",
        undocumented_location_usage,
        "Document why your app needs location access, how the data will be used, and ensure "
        "your NSLocationUsageDescription strings are clear and specific.",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-015",
        Severity.MEDIUM,
        "Camera Usage",
        "Apps requesting camera access must clearly explain why camera access is needed and how "
        "it will be used (App Store Review Guideline 5.1.1).",
        undocumented_camera_usage,
        "Document why your app needs camera access, how it will be used, and ensure your "
        "NSCameraUsageDescription string is clear and specific.",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-016",
        Severity.HIGH,
        "Minimum Functionality",
        "Apps should provide substantial functionality beyond a repackaged website. Apps that "
        "are not useful, unique, or \"app-like\" don't belong on the App Store (App Store "
        "Review Guideline 4.2).",
        lacks_minimum_functionality,
        "Enhance your app with native features, offline functionality, and interactive "
        "elements that provide value beyond a simple web experience.",
        ("README.md", "package.json"),
    ),
    _rule(
        "AAS-017",
        Severity.HIGH,
        "App Completeness",
        "Submissions should be final versions with all necessary functionality complete. "
        "Placeholder text, empty websites, and temporary content should be removed (App Store "
        "Review Guideline 2.1).",
        incomplete_app,
        'Remove all placeholder content, "coming soon" features, and incomplete functionality. '
        "Submit only fully functional, polished versions of your app.",
        ("README.md",),
    ),
    _rule(
        "AAS-018",
        Severity.HIGH,
        "App Tracking Transparency",
        "Apps that track users across other companies' apps and websites must use the App "
        "Tracking Transparency framework to request permission (App Store Review Guideline "
        "5.1.2).",
        tracking_without_att,
        "Implement the App Tracking Transparency framework and call "
        "requestTrackingAuthorization before collecting data for tracking. Add "
        "NSUserTrackingUsageDescription to Info.plist.",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-019",
        Severity.HIGH,
        "Sign in with Apple",
        "Apps that offer third-party social login must also offer Sign in with Apple as an "
        "equivalent option (App Store Review Guideline 4.8).",
        social_login_without_apple,
        "Implement Sign in with Apple using the AuthenticationServices framework and display it "
        "with equal prominence to other social login options.",
        ("README.md", "package.json"),
    ),
    _rule(
        "AAS-020",
        Severity.HIGH,
        "Account Deletion",
        "Apps that support account creation must provide an easy, in-app way for users to "
        "initiate account and data deletion (App Store Review Guideline 5.1.1).",
        missing_account_deletion,
        "Add a clearly visible account deletion feature in your app's settings or profile "
        "section that allows users to delete their account and data.",
        ("README.md",),
    ),
    _rule(
        "AAS-021",
        Severity.HIGH,
        "Usage Descriptions",
        "Apps accessing sensitive user data must provide clear, complete usage descriptions in "
        "Info.plist explaining why the data is needed (App Store Review Guideline 5.1.1).",
        missing_usage_descriptions,
        "Add comprehensive usage descriptions for all sensitive permissions in Info.plist "
        "(NSCameraUsageDescription, NSLocationUsageDescription, etc.) with clear explanations.",
        ("Info.plist", "README.md"),
    ),
    _rule(
        "AAS-022",
        Severity.HIGH,
        "Non-Public APIs",
        "Apps must only use public APIs and documented frameworks. Use of private or "
        "undocumented APIs will result in rejection (App Store Review Guideline 2.5.1).",
        uses_non_public_apis,
        "Replace all private API usage with public alternatives from official Apple SDKs. Use "
        "only documented APIs and frameworks.",
        ("README.md",),
    ),
    _rule(
        "AAS-023",
        Severity.HIGH,
        "Executable Code Download",
        "Apps may not download or execute code that introduces or changes features or "
        "functionality after installation (App Store Review Guideline 2.5.2).",
        downloads_executable_code,
        "Remove any code that downloads and executes external scripts or binaries. Use only "
        "standard WebView for web content display.",
        ("README.md",),
    ),
    _rule(
        "AAS-024",
        Severity.MEDIUM,
        "Subscription UX",
        "Subscription interfaces must be clear and transparent, with prominently displayed "
        "pricing, terms, and cancellation information (App Store Review Guideline 3.1.2).",
        misleading_subscription_ux,
        "Design clear subscription interfaces with transparent pricing, trial periods, and "
        "easy-to-find cancellation options. Avoid misleading or deceptive practices.",
        ("README.md",),
    ),
)
