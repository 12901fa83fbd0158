"""
Tests for the Content Validator — AI legitimacy checks over key files.
"""

import json

import pytest

from app.core.errors import AIServiceError
from app.llm.content_validator import (
    PARSE_FAILURE_MESSAGE,
    SERVICE_FAILURE_MESSAGE,
    VALIDATION_TARGETS,
    ContentValidator,
    content_issue_id,
)
from app.models.rule_models import Platform, Severity
from app.models.snapshot import FileSnapshot

INVALID = json.dumps(
    {
        "isValid": False,
        "issues": ["Generic template text", "No contact details"],
        "suggestions": ["Describe the app", "Add a support email"],
    }
)
VALID = json.dumps({"isValid": True, "issues": [], "suggestions": []})


def _respond_by_file(responses, default=VALID):
    def respond(model, prompt):
        for path, response in responses.items():
            if f"File: {path}\n" in prompt:
                return response
        return default

    return respond


def test_content_issue_id():
    assert content_issue_id("README.md") == "AI-CONTENT-README_MD"
    assert content_issue_id("privacy-policy.md") == "AI-CONTENT-PRIVACY_POLICY_MD"
    assert content_issue_id("AndroidManifest.xml") == "AI-CONTENT-ANDROIDMANIFEST_XML"


def test_validation_targets_order():
    assert [target.file for target in VALIDATION_TARGETS] == [
        "README.md",
        "PRIVACY.md",
        "privacy-policy.md",
        "manifest.json",
        "AndroidManifest.xml",
        "Info.plist",
        "package.json",
    ]


@pytest.mark.asyncio
async def test_absent_files_are_not_validated(make_generator):
    generator = make_generator()
    validator = ContentValidator(generator)

    issues = await validator.validate(FileSnapshot({"README.md": None, "TERMS.md": "t"}), Platform.APPLE_APP_STORE)

    assert issues == []
    assert generator.calls == []


@pytest.mark.asyncio
async def test_invalid_content_becomes_issue(make_generator):
    generator = make_generator(_respond_by_file({"README.md": INVALID}))
    validator = ContentValidator(generator)
    snapshot = FileSnapshot({"README.md": "# My App\nTODO", "package.json": "{}"})

    issues = await validator.validate(snapshot, Platform.GOOGLE_PLAY_STORE)

    assert len(issues) == 1
    issue = issues[0]
    assert issue.id == "AI-CONTENT-README_MD"
    assert issue.rule_id is None
    assert not issue.is_deterministic
    assert issue.severity == Severity.HIGH
    assert issue.category == "Content Validation"
    assert issue.file == "README.md"
    assert issue.description == (
        "AI detected content issues in README.md: Generic template text, No contact details"
    )
    assert issue.solution == (
        "Address the following content issues: Describe the app; Add a support email"
    )
    assert issue.ai_content_validation.is_legitimate is False
    assert issue.ai_content_validation.issues == ["Generic template text", "No contact details"]
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_config_files_are_medium_severity(make_generator):
    generator = make_generator(lambda model, prompt: INVALID)
    validator = ContentValidator(generator)

    issues = await validator.validate(FileSnapshot({"Info.plist": "<plist/>"}), Platform.APPLE_APP_STORE)

    assert [(i.id, i.severity) for i in issues] == [("AI-CONTENT-INFO_PLIST", Severity.MEDIUM)]


@pytest.mark.asyncio
async def test_issues_follow_target_order(make_generator):
    generator = make_generator(lambda model, prompt: INVALID)
    validator = ContentValidator(generator)
    snapshot = FileSnapshot(
        {"package.json": "{}", "manifest.json": "{}", "README.md": "readme", "PRIVACY.md": "p"}
    )

    issues = await validator.validate(snapshot, Platform.CHROME_WEB_STORE)

    assert [issue.file for issue in issues] == [
        "README.md",
        "PRIVACY.md",
        "manifest.json",
        "package.json",
    ]


@pytest.mark.asyncio
async def test_invalid_without_issues_is_not_reported(make_generator):
    generator = make_generator(lambda model, prompt: '{"isValid": false, "issues": []}')
    validator = ContentValidator(generator)

    assert await validator.validate(FileSnapshot({"README.md": "x"}), Platform.APPLE_APP_STORE) == []


@pytest.mark.asyncio
async def test_unparseable_response_is_reported(make_generator):
    generator = make_generator(lambda model, prompt: "The file looks fine to me!")
    validator = ContentValidator(generator)

    issues = await validator.validate(FileSnapshot({"README.md": "x"}), Platform.APPLE_APP_STORE)

    assert len(issues) == 1
    assert issues[0].ai_content_validation.issues == [PARSE_FAILURE_MESSAGE]
    assert issues[0].description.endswith(PARSE_FAILURE_MESSAGE)


@pytest.mark.asyncio
async def test_ai_service_failure_is_reported(make_generator):
    generator = make_generator(lambda model, prompt: AIServiceError("unavailable"))
    validator = ContentValidator(generator)

    verdict = await validator.validate_file("README.md", "x", "readme", Platform.APPLE_APP_STORE)

    assert verdict.is_valid is False
    assert verdict.issues == [SERVICE_FAILURE_MESSAGE]


@pytest.mark.asyncio
async def test_unexpected_error_skips_only_that_file(make_generator):
    def respond(model, prompt):
        if "File: README.md\n" in prompt:
            return ValueError("unexpected")
        return INVALID

    validator = ContentValidator(make_generator(respond))
    snapshot = FileSnapshot({"README.md": "x", "PRIVACY.md": "p"})

    issues = await validator.validate(snapshot, Platform.APPLE_APP_STORE)

    assert [issue.file for issue in issues] == ["PRIVACY.md"]


@pytest.mark.asyncio
async def test_prompt_is_truncated_and_uses_validation_model(make_generator):
    generator = make_generator()
    validator = ContentValidator(generator, model="tiny-model")

    await validator.validate_file("README.md", "a" * 5000 + "TAIL", "readme", Platform.APPLE_APP_STORE)

    model, prompt = generator.calls[0]
    assert model == "tiny-model"
    assert "TAIL" not in prompt
    assert "APPLE_APP_STORE" in prompt
