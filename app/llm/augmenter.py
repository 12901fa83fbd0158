"""
Issue Augmenter — AI enrichment of issues with line locations and fixes.

Augmentation is optional decoration. Any failure leaves the issue exactly as
the deterministic stages produced it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from app.config import settings
from app.core.errors import AIParseError, AIServiceError
from app.llm.gateway import AIGenerator, require_json_object
from app.llm.prompt_builder import build_augmentation_prompt
from app.models.issue_models import (
    ComplianceIssue,
    ContentValidation,
    IssueAugmentation,
    PinpointLocation,
    SuggestedFix,
)
from app.models.rule_models import Platform
from app.models.snapshot import FileSnapshot

logger = logging.getLogger("storecheck.llm.augmenter")

EMPTY_AUGMENTATION = IssueAugmentation()


def _line_numbers(value: Any) -> list[int]:
    if not isinstance(value, list):
        return []
    return [n for n in value if isinstance(n, int) and not isinstance(n, bool)]


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_augmentation(parsed: dict[str, Any], file_path: str) -> IssueAugmentation:
    """Map the model's JSON onto the three augmentation records."""
    return IssueAugmentation(
        ai_pinpoint_location=PinpointLocation(
            file_path=file_path,
            line_numbers=_line_numbers(parsed.get("lineNumbers")),
        ),
        ai_suggested_fix=SuggestedFix(
            explanation=_text(parsed.get("explanation")),
            code_snippet=_text(parsed.get("codeSnippet")),
        ),
        ai_content_validation=ContentValidation(
            is_legitimate=parsed.get("isLegitimate") is True,
            issues=_strings(parsed.get("contentIssues")),
            suggestions=_strings(parsed.get("suggestions")),
        ),
    )


class IssueAugmenter:
    """Per-issue AI enrichment, fanned out concurrently over an issue list."""

    def __init__(
        self,
        generator: AIGenerator,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.generator = generator
        self.model = model or settings.augmentation_model
        self.timeout = timeout if timeout is not None else settings.augmentation_timeout

    async def augment(
        self, issue: ComplianceIssue, snapshot: FileSnapshot, platform: Platform
    ) -> IssueAugmentation:
        """
        Augmentation record for one issue.

        Empty when the issue has no present file, or when the AI call fails
        or its response holds no JSON object.
        """
        file_path = issue.file
        if not file_path:
            return EMPTY_AUGMENTATION
        content = snapshot.content(file_path)
        if not content:
            return EMPTY_AUGMENTATION

        logger.info(f"Augmenting {issue.id} using {file_path}")
        prompt = build_augmentation_prompt(
            issue, file_path, content, platform, settings.augmentation_max_lines
        )
        try:
            text = await self.generator.generate(self.model, prompt)
            augmentation = parse_augmentation(require_json_object(text), file_path)
        except (AIServiceError, AIParseError) as e:
            logger.error(f"AI augmentation failed for {issue.id}: {e}")
            return EMPTY_AUGMENTATION

        logger.info(
            f"Augmented {issue.id}: legitimate="
            f"{augmentation.ai_content_validation.is_legitimate}, "
            f"lines={augmentation.ai_pinpoint_location.line_numbers}"
        )
        return augmentation

    async def augment_issue(
        self, issue: ComplianceIssue, snapshot: FileSnapshot, platform: Platform
    ) -> ComplianceIssue:
        """``issue ∪ augmentation``, or ``issue`` itself on any failure or timeout."""
        try:
            augmentation = await asyncio.wait_for(
                self.augment(issue, snapshot, platform), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"AI augmentation timed out for {issue.id} after {self.timeout}s")
            return issue
        except Exception as e:
            logger.error(f"AI augmentation failed for {issue.id}: {e}")
            return issue
        return issue.with_augmentation(augmentation)

    async def augment_all(
        self, issues: list[ComplianceIssue], snapshot: FileSnapshot, platform: Platform
    ) -> list[ComplianceIssue]:
        """Augment every issue concurrently; output order matches input order."""
        return list(
            await asyncio.gather(
                *(self.augment_issue(issue, snapshot, platform) for issue in issues)
            )
        )
