"""
Check Run Models — Lifecycle records handed to the persistence collaborator.

PENDING → IN_PROGRESS → COMPLETED | FAILED (both terminal).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from app.models.issue_models import ComplianceIssue
from app.models.rule_models import Platform


class CheckRunStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (CheckRunStatus.COMPLETED, CheckRunStatus.FAILED)


class CheckRunUpdate(BaseModel):
    """Fields written by update(); unset fields are left alone."""

    status: CheckRunStatus
    issues: list[ComplianceIssue] | None = None
    error_message: str | None = None
    completed_at: datetime | None = None


class CheckRun(BaseModel):
    """Stored check run as kept by the bundled stores."""

    id: str
    repository_id: str
    owner: str
    repo: str
    branch_name: str
    check_type: Platform
    status: CheckRunStatus = CheckRunStatus.PENDING
    issues: list[ComplianceIssue] = Field(default_factory=list)
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None


class CheckRequest(BaseModel):
    """Request body for POST /checks."""

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    platform: Platform
    branch: str = "main"


class CheckAccepted(BaseModel):
    check_run_id: str
    status: CheckRunStatus


class EvaluateRequest(BaseModel):
    """Request body for POST /checks/evaluate (caller-supplied snapshot)."""

    platform: Platform
    files: dict[str, str | None] = Field(default_factory=dict)
