"""
Compliance Pipeline — Orchestrates one compliance check run.

Pipeline:
1. Fetch the repository snapshot
2. Rule engine + AI content validation (concurrently, same snapshot)
3. Merge: deterministic issues first, then content issues
4. AI augmentation fan-out (per-issue, failure-isolated)
5. Persist COMPLETED with the final issue list

Any failure not isolated at a finer grain moves the run to FAILED and is
re-raised as OrchestrationError. FAILED runs carry no issue list.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from app.core.catalog import RuleCatalog
from app.core.errors import OrchestrationError
from app.core.rule_engine import RuleEngine
from app.llm.augmenter import IssueAugmenter
from app.llm.content_validator import ContentValidator
from app.llm.gateway import AIGenerator
from app.models.check_run_models import CheckRunStatus, CheckRunUpdate
from app.models.issue_models import AnalysisResult, ComplianceIssue, IssueSummary
from app.models.rule_models import Platform
from app.models.snapshot import FileSnapshot
from app.services.github_fetcher import FileFetcher, fetch_snapshot
from app.storage.check_runs import CheckRunStore

logger = logging.getLogger("storecheck.engine.pipeline")


class CompliancePipeline:
    """Async orchestrator for fetch → evaluate/validate → merge → augment → persist."""

    def __init__(
        self,
        fetcher: FileFetcher,
        store: CheckRunStore,
        generator: AIGenerator,
        catalog: RuleCatalog | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.rule_engine = RuleEngine(catalog)
        self.content_validator = ContentValidator(generator)
        self.augmenter = IssueAugmenter(generator)

    async def analyze(
        self, owner: str, repo: str, platform: Platform, branch: str | None = None
    ) -> AnalysisResult:
        """
        Run the analysis stages for one repository.

        Returns:
            AnalysisResult whose deterministic issues (catalog order) precede
            content-validation issues (target order).

        Raises:
            FileFetchUnavailable: the fetch collaborator is unreachable.
        """
        tag = f"{owner}/{repo}@{branch or 'default'}"
        logger.info(f"[{tag}] Starting {platform.value} analysis")

        # ── Step 1: Fetch ──
        snapshot = await fetch_snapshot(self.fetcher, owner, repo, branch)

        # ── Step 2: Rule engine + content validation ──
        deterministic, content = await asyncio.gather(
            asyncio.to_thread(self.deterministic_issues, snapshot, platform),
            self.content_validator.validate(snapshot, platform),
        )
        logger.info(
            f"[{tag}] {len(deterministic)} deterministic violations, "
            f"{len(content)} content validation issues"
        )

        # ── Step 3: Merge ──
        merged = [*deterministic, *content]

        # ── Step 4: Augment ──
        logger.info(f"[{tag}] Starting AI augmentation for {len(merged)} issues")
        issues = await self.augmenter.augment_all(merged, snapshot, platform)

        summary = IssueSummary.from_issues(issues)
        logger.info(
            f"[{tag}] Analysis complete: {summary.total} issues "
            f"(high={summary.high}, medium={summary.medium}, low={summary.low})"
        )
        return AnalysisResult(issues=issues, success=True, summary=summary)

    def deterministic_issues(
        self, snapshot: FileSnapshot, platform: Platform
    ) -> list[ComplianceIssue]:
        """Rule engine output as issues, without any AI involvement."""
        violated = self.rule_engine.evaluate(snapshot, platform)
        return self.rule_engine.to_issues(violated, snapshot)

    def open_run(
        self, owner: str, repo: str, platform: Platform, branch: str = "main"
    ) -> str:
        """Create the check run record (IN_PROGRESS) and return its id."""
        run_id = self.store.create(owner, repo, platform, branch)
        logger.info(f"[{run_id}] Check run created for {owner}/{repo}@{branch}")
        return run_id

    async def execute_run(
        self, run_id: str, owner: str, repo: str, platform: Platform, branch: str = "main"
    ) -> AnalysisResult:
        """
        Analyze and record the outcome on an already-open run.

        Raises:
            OrchestrationError: the run failed and was marked FAILED.
        """
        start_time = time.monotonic()
        try:
            result = await self.analyze(owner, repo, platform, branch)
            self.store.update(
                run_id,
                CheckRunUpdate(
                    status=CheckRunStatus.COMPLETED,
                    issues=result.issues,
                    completed_at=datetime.now(timezone.utc),
                ),
            )
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            logger.error(f"[{run_id}] Check run failed: {message}", exc_info=True)
            self._mark_failed(run_id, message)
            raise OrchestrationError(run_id, f"Check run {run_id} failed: {message}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(f"[{run_id}] Check run completed in {elapsed_ms:.0f}ms")
        return result

    async def analyze_and_persist(
        self, owner: str, repo: str, platform: Platform, branch: str = "main"
    ) -> str:
        """Full lifecycle: create → analyze → COMPLETED | FAILED. Returns the run id."""
        run_id = self.open_run(owner, repo, platform, branch)
        await self.execute_run(run_id, owner, repo, platform, branch)
        return run_id

    def _mark_failed(self, run_id: str, message: str) -> None:
        try:
            self.store.update(
                run_id,
                CheckRunUpdate(
                    status=CheckRunStatus.FAILED,
                    error_message=message,
                    completed_at=datetime.now(timezone.utc),
                ),
            )
        except Exception as e:
            logger.error(f"[{run_id}] Could not record FAILED state: {e}")
