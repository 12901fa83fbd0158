"""
Tests for the HTTP surface — integration through FastAPI's TestClient.
"""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_check_run_store,
    get_file_fetcher,
    get_llm_gateway,
    get_pipeline,
)
from app.core.errors import FileFetchUnavailable
from app.engine.pipeline import CompliancePipeline
from app.llm.gateway import LLMGateway
from app.main import app
from app.models.check_run_models import CheckRunStatus, CheckRunUpdate
from app.models.rule_models import Platform
from app.storage.check_runs import InMemoryCheckRunStore, JsonlCheckRunStore

client = TestClient(app)


@pytest.fixture
def store():
    store = InMemoryCheckRunStore()
    app.dependency_overrides[get_check_run_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def _use_pipeline(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "validation_model" in data
    assert "augmentation_model" in data


def test_list_all_rules():
    response = client.get("/rules")
    assert response.status_code == 200
    rules = response.json()
    assert len(rules) == 42
    assert rules[0]["rule_id"] == "AAS-001"
    assert rules[0]["severity"] == "high"
    assert rules[0]["solution"]


def test_list_rules_for_aggregate_platform():
    response = client.get("/rules", params={"platform": "MOBILE_PLATFORMS"})
    assert response.status_code == 200
    platforms = {rule["platform"] for rule in response.json()}
    assert platforms == {"APPLE_APP_STORE", "GOOGLE_PLAY_STORE"}
    assert len(response.json()) == 35


def test_list_rules_unknown_platform():
    response = client.get("/rules", params={"platform": "WINDOWS_STORE"})
    assert response.status_code == 422


def test_evaluate_snapshot():
    response = client.post(
        "/checks/evaluate",
        json={
            "platform": "CHROME_WEB_STORE",
            "files": {"manifest.json": json.dumps({"manifest_version": 2}), "README.md": None},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    ids = [issue["id"] for issue in data["issues"]]
    assert "CWS-001" in ids
    assert data["summary"]["total"] == len(ids)
    assert all(issue["ai_suggested_fix"] is None for issue in data["issues"])


def test_evaluate_rejects_bad_body():
    response = client.post("/checks/evaluate", json={"files": {}})
    assert response.status_code == 422
    assert "detail" in response.json()


def test_start_check_runs_in_background(store, make_fetcher, make_generator):
    _use_pipeline(
        CompliancePipeline(
            fetcher=make_fetcher({"README.md": "A simple app. Contact: hello@example.com"}),
            store=store,
            generator=make_generator(),
        )
    )

    response = client.post(
        "/checks", json={"owner": "acme", "repo": "app", "platform": "APPLE_APP_STORE"}
    )

    assert response.status_code == 202
    run_id = response.json()["check_run_id"]
    assert response.json()["status"] == "IN_PROGRESS"

    run = client.get(f"/checks/{run_id}").json()
    assert run["status"] == "COMPLETED"
    assert run["branch_name"] == "main"
    assert "AAS-001" in [issue["id"] for issue in run["issues"]]


def test_failed_check_is_recorded(store, make_fetcher, make_generator):
    _use_pipeline(
        CompliancePipeline(
            fetcher=make_fetcher(error=FileFetchUnavailable("GitHub is down")),
            store=store,
            generator=make_generator(),
        )
    )

    response = client.post(
        "/checks",
        json={"owner": "acme", "repo": "app", "platform": "GOOGLE_PLAY_STORE", "branch": "dev"},
    )
    run_id = response.json()["check_run_id"]

    run = client.get(f"/checks/{run_id}").json()
    assert run["status"] == "FAILED"
    assert "GitHub is down" in run["error_message"]
    assert run["issues"] == []


def test_unknown_check_is_404(store):
    response = client.get("/checks/does-not-exist")
    assert response.status_code == 404


def test_health_reports_tokens_used():
    gateway = LLMGateway(client=SimpleNamespace())
    gateway.total_tokens_used = 42
    app.dependency_overrides[get_llm_gateway] = lambda: gateway
    try:
        response = client.get("/health")
    finally:
        app.dependency_overrides.clear()

    assert response.json()["tokens_used"] == 42


def test_list_checks(store):
    first = store.create("acme", "app", Platform.APPLE_APP_STORE, "main")
    second = store.create("acme", "ext", Platform.CHROME_WEB_STORE, "main")

    response = client.get("/checks")
    assert response.status_code == 200
    assert {run["id"] for run in response.json()} == {first, second}

    assert len(client.get("/checks", params={"limit": 1}).json()) == 1
    assert client.get("/checks", params={"limit": 0}).status_code == 422


def test_check_events_tail(tmp_path):
    store = JsonlCheckRunStore(str(tmp_path / "runs.jsonl"))
    app.dependency_overrides[get_check_run_store] = lambda: store
    try:
        run_id = store.create("acme", "app", Platform.GOOGLE_PLAY_STORE, "main")
        store.update(run_id, CheckRunUpdate(status=CheckRunStatus.COMPLETED, issues=[]))

        events = client.get("/checks/events").json()["events"]
        latest = client.get("/checks/events", params={"limit": 1}).json()["events"]
    finally:
        app.dependency_overrides.clear()

    assert [event["event"] for event in events] == ["create", "update"]
    assert events[0]["id"] == run_id
    assert [event["event"] for event in latest] == ["update"]


def test_shutdown_closes_github_client():
    get_file_fetcher.cache_clear()
    fetcher = get_file_fetcher()

    with TestClient(app):
        assert not fetcher.client.is_closed

    assert fetcher.client.is_closed
    assert get_file_fetcher.cache_info().currsize == 0
