"""
Checks Routes — POST /checks, POST /checks/evaluate, GET /checks, GET /checks/events,
GET /checks/{id}

POST /checks opens a check run and analyzes the repository in the
background; the run is polled through GET /checks/{id}.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from app.api.dependencies import get_check_run_store, get_pipeline, get_rule_engine
from app.core.errors import OrchestrationError
from app.core.rule_engine import RuleEngine
from app.engine.pipeline import CompliancePipeline
from app.models.check_run_models import (
    CheckAccepted,
    CheckRequest,
    CheckRun,
    CheckRunStatus,
    EvaluateRequest,
)
from app.models.issue_models import AnalysisResult, IssueSummary
from app.models.snapshot import FileSnapshot
from app.storage.check_runs import InMemoryCheckRunStore, JsonlCheckRunStore

logger = logging.getLogger("storecheck.api.checks")

router = APIRouter()


async def _run_check(pipeline: CompliancePipeline, run_id: str, request: CheckRequest) -> None:
    try:
        await pipeline.execute_run(
            run_id, request.owner, request.repo, request.platform, request.branch
        )
    except OrchestrationError as e:
        # Already recorded as FAILED on the run
        logger.error(f"Background check {e.check_run_id} failed: {e}")


@router.post("/checks", response_model=CheckAccepted, status_code=202)
async def start_check(
    request: CheckRequest,
    background_tasks: BackgroundTasks,
    pipeline: CompliancePipeline = Depends(get_pipeline),
):
    """Open a check run and schedule the analysis."""
    run_id = pipeline.open_run(request.owner, request.repo, request.platform, request.branch)
    background_tasks.add_task(_run_check, pipeline, run_id, request)
    return CheckAccepted(check_run_id=run_id, status=CheckRunStatus.IN_PROGRESS)


@router.post("/checks/evaluate", response_model=AnalysisResult)
async def evaluate_snapshot(
    request: EvaluateRequest,
    engine: RuleEngine = Depends(get_rule_engine),
):
    """
    Deterministic-only evaluation of a caller-supplied snapshot.

    No fetch, no AI, nothing persisted.
    """
    snapshot = FileSnapshot(request.files)
    violated = engine.evaluate(snapshot, request.platform)
    issues = engine.to_issues(violated, snapshot)
    return AnalysisResult(issues=issues, success=True, summary=IssueSummary.from_issues(issues))


@router.get("/checks", response_model=list[CheckRun])
async def list_checks(
    limit: int = Query(50, ge=1, le=500),
    store: InMemoryCheckRunStore = Depends(get_check_run_store),
):
    """Most recently opened check runs first."""
    return store.list_recent(count=limit)


@router.get("/checks/events")
async def list_check_events(
    limit: int = Query(50, ge=1, le=500),
    store: JsonlCheckRunStore = Depends(get_check_run_store),
):
    """Tail of the check run event log."""
    return {"events": store.read_events(count=limit)}


@router.get("/checks/{run_id}", response_model=CheckRun)
async def get_check(
    run_id: str,
    store: InMemoryCheckRunStore = Depends(get_check_run_store),
):
    run = store.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Check run {run_id} not found")
    return run
