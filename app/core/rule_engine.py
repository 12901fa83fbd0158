"""
Rule Engine — Evaluates the rule catalog against a file snapshot.

No LLM involvement — pure deterministic analysis. A predicate that raises is
logged and treated as "not violated"; it never stops the remaining rules.
"""

from __future__ import annotations

import logging
import time

from app.core.catalog import RuleCatalog, build_default_catalog
from app.core.errors import RuleEvaluationError
from app.core.rules.signals import ANDROID_MANIFEST, PACKAGE_JSON, PRIVACY_FILES, README
from app.models.issue_models import ComplianceIssue
from app.models.rule_models import ComplianceRule, Platform, RuleResult
from app.models.snapshot import FileSnapshot

logger = logging.getLogger("storecheck.rules")


class RuleEngine:
    """
    Deterministic rule engine.

    Runs the platform's slice of the catalog against one FileSnapshot.
    Rules are pure functions — no LLM, no network, no randomness.
    """

    def __init__(self, catalog: RuleCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else build_default_catalog()

    def evaluate(self, snapshot: FileSnapshot, platform: Platform) -> list[ComplianceRule]:
        """Violated rules for ``platform``, in catalog order."""
        violated, _ = self._evaluate(snapshot, platform)
        return violated

    def run(self, snapshot: FileSnapshot, platform: Platform) -> RuleResult:
        """
        Evaluate and report which rules ran, which failed and how long it took.

        Args:
            snapshot: Repository files for this run.
            platform: Target platform (aggregates expand to their platforms).

        Returns:
            RuleResult with violated rule ids in catalog order.
        """
        start = time.monotonic()
        violated, failed = self._evaluate(snapshot, platform)
        elapsed = (time.monotonic() - start) * 1000

        return RuleResult(
            violated_rule_ids=[rule.rule_id for rule in violated],
            rules_executed=[rule.rule_id for rule in self.catalog.rules_for_platform(platform)],
            rules_failed=failed,
            scan_duration_ms=round(elapsed, 2),
        )

    def _evaluate(
        self, snapshot: FileSnapshot, platform: Platform
    ) -> tuple[list[ComplianceRule], list[str]]:
        violated: list[ComplianceRule] = []
        failed: list[str] = []

        for rule in self.catalog.rules_for_platform(platform):
            try:
                if rule.check(snapshot):
                    violated.append(rule)
            except Exception as e:
                # Rule failures should not crash the engine
                error = RuleEvaluationError(rule.rule_id, e)
                logger.error(str(error), exc_info=True)
                failed.append(rule.rule_id)

        return violated, failed

    def to_issues(
        self, rules: list[ComplianceRule], snapshot: FileSnapshot
    ) -> list[ComplianceIssue]:
        """Convert violated rules 1:1 into issues, attributing a display file to each."""
        return [
            ComplianceIssue(
                id=rule.rule_id,
                rule_id=rule.rule_id,
                severity=rule.severity,
                category=rule.category,
                description=rule.description,
                solution=rule.static_solution,
                file=find_relevant_file(rule, snapshot),
            )
            for rule in rules
        ]


def find_relevant_file(rule: ComplianceRule, snapshot: FileSnapshot) -> str:
    """
    Best-effort display file for a violation.

    Declared files first (first present wins), then a category heuristic,
    then the README unconditionally.
    """
    for path in rule.required_files:
        if snapshot.is_present(path):
            return path

    category = rule.category.lower()
    if "privacy" in category:
        return PRIVACY_FILES[0] if snapshot.is_present(PRIVACY_FILES[0]) else README
    if "permission" in category:
        return ANDROID_MANIFEST if snapshot.is_present(ANDROID_MANIFEST) else README
    if "description" in category:
        return README if snapshot.is_present(README) else PACKAGE_JSON

    return README
