"""
Issue Data Models — Compliance issues, AI augmentation records, analysis results.

Issues are frozen: augmentation produces a new issue, the deterministic
fields of the original are never touched.
"""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field

from app.models.rule_models import Severity, max_severity


class PinpointLocation(BaseModel):
    """Where in a file the AI located the violation."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    line_numbers: list[int] = Field(default_factory=list)


class SuggestedFix(BaseModel):
    """AI-proposed remediation for one issue."""

    model_config = ConfigDict(frozen=True)

    explanation: str = ""
    code_snippet: str = ""


class ContentValidation(BaseModel):
    """AI legitimacy judgment of a file's content."""

    model_config = ConfigDict(frozen=True)

    is_legitimate: bool = False
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class IssueAugmentation(BaseModel):
    """Partial augmentation record; any subset of the three fields may be set."""

    model_config = ConfigDict(frozen=True)

    ai_pinpoint_location: PinpointLocation | None = None
    ai_suggested_fix: SuggestedFix | None = None
    ai_content_validation: ContentValidation | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.ai_pinpoint_location is None
            and self.ai_suggested_fix is None
            and self.ai_content_validation is None
        )


class ComplianceIssue(BaseModel):
    """A single compliance finding."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Rule id, or AI-CONTENT-<FILE> for content issues")
    rule_id: str | None = Field(
        default=None, description="Deterministic rule that detected this; None for AI-only issues"
    )
    severity: Severity
    category: str
    description: str
    solution: str
    file: str | None = None

    ai_pinpoint_location: PinpointLocation | None = None
    ai_suggested_fix: SuggestedFix | None = None
    ai_content_validation: ContentValidation | None = None

    @property
    def is_deterministic(self) -> bool:
        return self.rule_id is not None

    def with_augmentation(self, augmentation: IssueAugmentation) -> ComplianceIssue:
        """Return ``self ∪ augmentation`` as a new issue. Unset fields are kept."""
        update = {
            name: value
            for name, value in (
                ("ai_pinpoint_location", augmentation.ai_pinpoint_location),
                ("ai_suggested_fix", augmentation.ai_suggested_fix),
                ("ai_content_validation", augmentation.ai_content_validation),
            )
            if value is not None
        }
        if not update:
            return self
        return self.model_copy(update=update)


class IssueSummary(BaseModel):
    """Per-severity counts for a list of issues."""

    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    highest_severity: Severity | None = None

    @classmethod
    def from_issues(cls, issues: list[ComplianceIssue]) -> IssueSummary:
        counts = Counter(issue.severity for issue in issues)
        return cls(
            total=len(issues),
            high=counts[Severity.HIGH],
            medium=counts[Severity.MEDIUM],
            low=counts[Severity.LOW],
            highest_severity=max_severity(counts),
        )


class AnalysisResult(BaseModel):
    """Ordered issues of one run plus a success flag."""

    issues: list[ComplianceIssue] = Field(default_factory=list)
    success: bool = True
    summary: IssueSummary = Field(default_factory=IssueSummary)
