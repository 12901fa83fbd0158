"""
Content Validator — AI legitimacy check of key repository files.

Runs over a fixed, ordered list of (file, content type, severity) targets,
independently of the rule engine. A missing file is skipped: absence is the
rule engine's concern, not a content problem.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field

from app.config import settings
from app.core.errors import AIParseError, AIServiceError
from app.llm.gateway import AIGenerator, require_json_object
from app.llm.prompt_builder import ContentType, build_validation_prompt
from app.models.issue_models import ComplianceIssue, ContentValidation
from app.models.rule_models import Platform, Severity
from app.models.snapshot import FileSnapshot

logger = logging.getLogger("storecheck.llm.content_validator")

CONTENT_VALIDATION_CATEGORY = "Content Validation"
PARSE_FAILURE_MESSAGE = "Failed to parse AI response"
SERVICE_FAILURE_MESSAGE = "AI validation failed"


@dataclass(frozen=True)
class ValidationTarget:
    file: str
    content_type: ContentType
    severity: Severity


VALIDATION_TARGETS: tuple[ValidationTarget, ...] = (
    ValidationTarget("README.md", "readme", Severity.HIGH),
    ValidationTarget("PRIVACY.md", "privacy_policy", Severity.HIGH),
    ValidationTarget("privacy-policy.md", "privacy_policy", Severity.HIGH),
    ValidationTarget("manifest.json", "manifest", Severity.HIGH),
    ValidationTarget("AndroidManifest.xml", "manifest", Severity.HIGH),
    ValidationTarget("Info.plist", "config", Severity.MEDIUM),
    ValidationTarget("package.json", "config", Severity.MEDIUM),
)


@dataclass
class ContentVerdict:
    """The model's judgment of one file."""

    is_valid: bool
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def content_issue_id(file_path: str) -> str:
    """``PRIVACY.md`` → ``AI-CONTENT-PRIVACY_MD``."""
    return "AI-CONTENT-" + re.sub(r"[^A-Za-z0-9]", "_", file_path).upper()


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


class ContentValidator:
    """Asks the model whether each target file holds real, non-placeholder content."""

    def __init__(
        self,
        generator: AIGenerator,
        targets: tuple[ValidationTarget, ...] = VALIDATION_TARGETS,
        model: str | None = None,
    ) -> None:
        self.generator = generator
        self.targets = targets
        self.model = model or settings.validation_model

    async def validate(self, snapshot: FileSnapshot, platform: Platform) -> list[ComplianceIssue]:
        """
        Content issues for the present target files, in target order.

        Files are validated concurrently; each is isolated, so one failing
        file never affects the others.
        """
        present = [target for target in self.targets if snapshot.is_present(target.file)]
        results = await asyncio.gather(
            *(self._validate_target(target, snapshot, platform) for target in present)
        )
        return [issue for issue in results if issue is not None]

    async def _validate_target(
        self, target: ValidationTarget, snapshot: FileSnapshot, platform: Platform
    ) -> ComplianceIssue | None:
        try:
            logger.info(f"Validating {target.file} as {target.content_type}")
            verdict = await self.validate_file(
                target.file, snapshot.text(target.file), target.content_type, platform
            )
            if verdict.is_valid or not verdict.issues:
                return None
            return build_content_issue(target, verdict)
        except Exception as e:
            logger.error(f"Content validation of {target.file} failed: {e}", exc_info=True)
            return None

    async def validate_file(
        self,
        file_path: str,
        content: str,
        content_type: ContentType,
        platform: Platform,
    ) -> ContentVerdict:
        """
        Judge one file. Never raises for AI problems.

        An unparseable response or a failed AI call yields an invalid verdict
        carrying a fixed diagnostic message.
        """
        prompt = build_validation_prompt(
            file_path, content, content_type, platform, settings.validation_max_chars
        )
        try:
            text = await self.generator.generate(self.model, prompt)
            parsed = require_json_object(text)
        except AIParseError as e:
            logger.warning(f"Unparseable validation response for {file_path}: {e}")
            return ContentVerdict(is_valid=False, issues=[PARSE_FAILURE_MESSAGE])
        except (AIServiceError, asyncio.TimeoutError) as e:
            logger.warning(f"AI validation call for {file_path} failed: {e}")
            return ContentVerdict(is_valid=False, issues=[SERVICE_FAILURE_MESSAGE])

        return ContentVerdict(
            is_valid=parsed.get("isValid") is True,
            issues=_string_list(parsed.get("issues")),
            suggestions=_string_list(parsed.get("suggestions")),
        )


def build_content_issue(target: ValidationTarget, verdict: ContentVerdict) -> ComplianceIssue:
    return ComplianceIssue(
        id=content_issue_id(target.file),
        rule_id=None,
        severity=target.severity,
        category=CONTENT_VALIDATION_CATEGORY,
        description=(
            f"AI detected content issues in {target.file}: {', '.join(verdict.issues)}"
        ),
        solution=(
            f"Address the following content issues: {'; '.join(verdict.suggestions)}"
        ),
        file=target.file,
        ai_content_validation=ContentValidation(
            is_legitimate=verdict.is_valid,
            issues=list(verdict.issues),
            suggestions=list(verdict.suggestions),
        ),
    )
