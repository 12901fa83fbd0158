"""
Check Run Store — Persistence of check run lifecycle records.

The pipeline only needs ``create`` and ``update``. The bundled stores keep
runs in memory; ``JsonlCheckRunStore`` additionally appends every change to
a JSON-lines event log.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from app.config import settings
from app.models.check_run_models import CheckRun, CheckRunStatus, CheckRunUpdate
from app.models.rule_models import Platform

logger = logging.getLogger("storecheck.storage")


class CheckRunStore(Protocol):
    def create(self, owner: str, repo: str, check_type: Platform, branch: str) -> str: ...

    def update(self, run_id: str, update: CheckRunUpdate) -> None: ...


class InMemoryCheckRunStore:
    """Process-local store (swap for a database in production)."""

    def __init__(self) -> None:
        self._runs: dict[str, CheckRun] = {}

    def create(self, owner: str, repo: str, check_type: Platform, branch: str) -> str:
        run_id = str(uuid.uuid4())
        self._runs[run_id] = CheckRun(
            id=run_id,
            repository_id=f"{owner}/{repo}",
            owner=owner,
            repo=repo,
            branch_name=branch,
            check_type=check_type,
            status=CheckRunStatus.IN_PROGRESS,
        )
        return run_id

    def update(self, run_id: str, update: CheckRunUpdate) -> None:
        """Apply the set fields of ``update``. Unknown ids raise KeyError."""
        run = self._runs[run_id]
        changes = {name: value for name, value in update if value is not None}
        self._runs[run_id] = run.model_copy(update=changes)

    def get(self, run_id: str) -> CheckRun | None:
        return self._runs.get(run_id)

    def list_recent(self, count: int = 50) -> list[CheckRun]:
        """Most recently created runs first."""
        runs = sorted(self._runs.values(), key=lambda r: r.created_at, reverse=True)
        return runs[:count]


class JsonlCheckRunStore(InMemoryCheckRunStore):
    """In-memory store that also writes each create/update to a JSON-lines file."""

    def __init__(self, log_path: str | None = None) -> None:
        super().__init__()
        self.log_path = Path(log_path or settings.check_run_log_path)

    def create(self, owner: str, repo: str, check_type: Platform, branch: str) -> str:
        run_id = super().create(owner, repo, check_type, branch)
        self._append({"event": "create", **self._runs[run_id].model_dump(mode="json")})
        return run_id

    def update(self, run_id: str, update: CheckRunUpdate) -> None:
        super().update(run_id, update)
        self._append(
            {"event": "update", "id": run_id, **update.model_dump(mode="json", exclude_none=True)}
        )

    def _append(self, record: dict) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            **record,
        }
        try:
            with open(self.log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write check run log: {e}")

    def read_events(self, count: int = 50) -> list[dict]:
        """The most recent N logged events."""
        if not self.log_path.exists():
            return []

        events: list[dict] = []
        try:
            with open(self.log_path) as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            events.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError:
            return []

        return events[-count:]
