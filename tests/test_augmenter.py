"""
Tests for the Issue Augmenter — enrichment never destroys deterministic output.
"""

import json

import pytest

from app.core.errors import AIServiceError
from app.llm.augmenter import IssueAugmenter, parse_augmentation
from app.models.issue_models import ComplianceIssue
from app.models.rule_models import Platform, Severity
from app.models.snapshot import FileSnapshot

AUGMENTATION = json.dumps(
    {
        "isLegitimate": False,
        "contentIssues": ["No privacy link"],
        "suggestions": ["Link the hosted policy"],
        "lineNumbers": [2, "3", 4.5, True, 7],
        "explanation": "The README never links a privacy policy.",
        "codeSnippet": "Privacy policy: https://example.com/privacy",
    }
)


def _issue(issue_id="AAS-001", file="README.md"):
    return ComplianceIssue(
        id=issue_id,
        rule_id=issue_id,
        severity=Severity.HIGH,
        category="Privacy Policy",
        description="No privacy policy",
        solution="Add one",
        file=file,
    )


@pytest.fixture
def snapshot():
    return FileSnapshot({"README.md": "# App\nLine two\nLine three"})


def test_parse_augmentation_keeps_only_integer_lines():
    augmentation = parse_augmentation(json.loads(AUGMENTATION), "README.md")
    assert augmentation.ai_pinpoint_location.file_path == "README.md"
    assert augmentation.ai_pinpoint_location.line_numbers == [2, 7]
    assert augmentation.ai_suggested_fix.code_snippet.startswith("Privacy policy")
    assert augmentation.ai_content_validation.is_legitimate is False
    assert augmentation.ai_content_validation.issues == ["No privacy link"]


@pytest.mark.asyncio
async def test_augment_issue_adds_all_three_records(make_generator, snapshot):
    generator = make_generator(lambda model, prompt: AUGMENTATION)
    augmenter = IssueAugmenter(generator, model="big-model")
    issue = _issue()

    augmented = await augmenter.augment_issue(issue, snapshot, Platform.APPLE_APP_STORE)

    assert augmented.ai_pinpoint_location.line_numbers == [2, 7]
    assert augmented.ai_suggested_fix.explanation == "The README never links a privacy policy."
    assert augmented.ai_content_validation.suggestions == ["Link the hosted policy"]
    # Deterministic fields carried over, original untouched
    assert augmented.model_dump(exclude={"ai_pinpoint_location", "ai_suggested_fix", "ai_content_validation"}) == issue.model_dump(
        exclude={"ai_pinpoint_location", "ai_suggested_fix", "ai_content_validation"}
    )
    assert issue.ai_pinpoint_location is None

    model, prompt = generator.calls[0]
    assert model == "big-model"
    assert "Rule ID: AAS-001" in prompt
    assert "2: Line two" in prompt


@pytest.mark.asyncio
async def test_issue_without_present_file_is_not_sent(make_generator, snapshot):
    generator = make_generator(lambda model, prompt: AUGMENTATION)
    augmenter = IssueAugmenter(generator)

    no_file = _issue(file=None)
    missing_file = _issue(file="PRIVACY.md")

    assert await augmenter.augment_issue(no_file, snapshot, Platform.APPLE_APP_STORE) is no_file
    assert await augmenter.augment_issue(missing_file, snapshot, Platform.APPLE_APP_STORE) is missing_file
    assert (await augmenter.augment(no_file, snapshot, Platform.APPLE_APP_STORE)).is_empty
    assert generator.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [AIServiceError("down"), RuntimeError("bug"), "no json at all"],
)
async def test_failure_returns_issue_unchanged(make_generator, snapshot, response):
    augmenter = IssueAugmenter(make_generator(lambda model, prompt: response))
    issue = _issue()

    result = await augmenter.augment_issue(issue, snapshot, Platform.APPLE_APP_STORE)

    assert result == issue
    assert result.ai_pinpoint_location is None
    assert result.ai_suggested_fix is None
    assert result.ai_content_validation is None


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [AIServiceError("down"), "I cannot help with that."])
async def test_augment_returns_empty_record_on_ai_failure(make_generator, snapshot, response):
    generator = make_generator(lambda model, prompt: response)
    augmenter = IssueAugmenter(generator)

    augmentation = await augmenter.augment(_issue(), snapshot, Platform.APPLE_APP_STORE)

    assert augmentation.is_empty
    assert len(generator.calls) == 1


@pytest.mark.asyncio
async def test_timeout_returns_issue_unchanged(make_generator, snapshot):
    generator = make_generator(lambda model, prompt: AUGMENTATION, delay=1.0)
    augmenter = IssueAugmenter(generator, timeout=0.01)
    issue = _issue()

    assert await augmenter.augment_issue(issue, snapshot, Platform.APPLE_APP_STORE) == issue


@pytest.mark.asyncio
async def test_augment_all_keeps_order_and_isolates_failures(make_generator, snapshot):
    def respond(model, prompt):
        if "Rule ID: AAS-002" in prompt:
            return AIServiceError("down")
        return AUGMENTATION

    augmenter = IssueAugmenter(make_generator(respond))
    issues = [_issue("AAS-001"), _issue("AAS-002"), _issue("AAS-003")]

    results = await augmenter.augment_all(issues, snapshot, Platform.APPLE_APP_STORE)

    assert [r.id for r in results] == ["AAS-001", "AAS-002", "AAS-003"]
    assert results[0].ai_suggested_fix is not None
    assert results[1] is issues[1]
    assert results[2].ai_suggested_fix is not None
