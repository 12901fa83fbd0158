"""
Rule Catalog Data Models — Platforms, severities, rule definitions and results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from app.models.snapshot import FileSnapshot


class Platform(str, Enum):
    APPLE_APP_STORE = "APPLE_APP_STORE"
    GOOGLE_PLAY_STORE = "GOOGLE_PLAY_STORE"
    CHROME_WEB_STORE = "CHROME_WEB_STORE"
    MOBILE_PLATFORMS = "MOBILE_PLATFORMS"

    @property
    def is_aggregate(self) -> bool:
        return self in _AGGREGATES

    def underlying(self) -> tuple[Platform, ...]:
        """Concrete platforms this value stands for (itself unless aggregate)."""
        return _AGGREGATES.get(self, (self,))


_AGGREGATES: dict[Platform, tuple[Platform, ...]] = {
    Platform.MOBILE_PLATFORMS: (Platform.APPLE_APP_STORE, Platform.GOOGLE_PLAY_STORE),
}


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_RANKS[self]


SEVERITY_RANKS: dict[Severity, int] = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


def max_severity(severities: Iterable[Severity]) -> Severity | None:
    """Highest severity in the iterable, or None when empty."""
    return max(severities, key=lambda s: s.rank, default=None)


RuleCheckFn = Callable[["FileSnapshot"], bool]


@dataclass(frozen=True)
class ComplianceRule:
    """
    A single catalog entry.

    ``check`` returns True when the snapshot violates the rule. It must be a
    pure function of the snapshot. ``required_files`` is only used to pick a
    display file for a violation, never by the predicate itself.
    """

    rule_id: str
    platform: Platform
    severity: Severity
    category: str
    description: str
    check: RuleCheckFn
    static_solution: str
    required_files: tuple[str, ...] = ()

    def applies_to(self, platform: Platform) -> bool:
        return self.platform == platform


class RuleSummary(BaseModel):
    """Public, predicate-free view of a rule (API listing)."""

    rule_id: str
    platform: Platform
    severity: Severity
    category: str
    description: str
    solution: str
    required_files: list[str] = Field(default_factory=list)

    @classmethod
    def from_rule(cls, rule: ComplianceRule) -> RuleSummary:
        return cls(
            rule_id=rule.rule_id,
            platform=rule.platform,
            severity=rule.severity,
            category=rule.category,
            description=rule.description,
            solution=rule.static_solution,
            required_files=list(rule.required_files),
        )


class RuleResult(BaseModel):
    """Result of evaluating the catalog against one snapshot."""

    violated_rule_ids: list[str] = Field(default_factory=list)
    rules_executed: list[str] = Field(default_factory=list)
    rules_failed: list[str] = Field(default_factory=list)
    scan_duration_ms: float = 0.0
