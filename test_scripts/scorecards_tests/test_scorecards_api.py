# HTTP tests for the scorecard routes
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from scorecards.api.deps import get_scorecard_service
from scorecards.config import settings
from scorecards.main import create_app
from scorecards.services.errors import ScopeResolutionError
from scorecards.services.metrics_fetcher import SubjectMetricsFetcher
from scorecards.services.scope import ScopeResolver
from scorecards.services.scorecard_service import ScorecardService

SECRET = "test-secret"
WINDOW_PARAMS = {"from": "2025-03-01", "to": "2025-03-29"}


@pytest.fixture()
def app(monkeypatch, service):
    monkeypatch.setattr(settings, "SCORECARDS_SECRET", SECRET)
    application = create_app()
    application.dependency_overrides[get_scorecard_service] = lambda: service
    return application


@pytest.fixture()
def client(app):
    with TestClient(app, headers={"X-SCORECARDS-SECRET": SECRET}) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_secret_is_required(app):
    with TestClient(app) as anonymous:
        resp = anonymous.get("/analytics/hr/scorecards/employees")
    assert resp.status_code == 401


def test_unconfigured_secret_fails_closed(app, monkeypatch):
    monkeypatch.setattr(settings, "SCORECARDS_SECRET", "")
    with TestClient(app, headers={"X-SCORECARDS-SECRET": SECRET}) as c:
        resp = c.get("/analytics/hr/scorecards/employees")
    assert resp.status_code == 500


def test_employee_scorecards(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees", params=WINDOW_PARAMS)
    assert resp.status_code == 200
    body = resp.json()

    assert [i["username"] for i in body["items"]] == ["alice", "bob", "carol"]
    alice = body["items"][0]
    assert alice["userId"] == seeded_store["alice"]
    assert alice["department"] == "Engineering"
    assert alice["score"] == 84
    assert alice["metrics"] == {
        "completed": 3,
        "pending": 2,
        "overdueOpen": 1,
        "weeks": 4,
        "throughput": 0.75,
        "onTimeRate": 100,
        "completionRate": 60,
        "overdueRate": 33,
    }
    assert body["summary"] == {"count": 3, "avgScore": 49, "topPerformer": "alice"}


def test_weight_overrides_are_applied(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees", params={**WINDOW_PARAMS, "wPenalty": "0"})
    alice = resp.json()["items"][0]
    assert alice["score"] == 94


def test_garbage_weights_fall_back_to_preset(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees", params={**WINDOW_PARAMS, "wOnTime": "lots"})
    assert resp.json()["items"][0]["score"] == 84


def test_infinite_weight_is_clamped_not_ignored(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees", params={**WINDOW_PARAMS, "wOnTime": "Infinity"})
    # on-time weight clamps to 100: 100 + 40 + 9 - 10 = 139 -> 100
    assert resp.json()["items"][0]["score"] == 100


def test_empty_department(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees", params={**WINDOW_PARAMS, "department": "999"})
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "summary": {"count": 0}}


def test_rankings(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/rankings", params={**WINDOW_PARAMS, "top": "2", "low": "1"})
    body = resp.json()
    assert [i["username"] for i in body["top"]] == ["alice", "bob"]
    assert [i["username"] for i in body["low"]] == ["carol"]
    assert body["summary"] == {"count": 3, "avgScore": 49, "topCutoff": 64, "lowCutoff": 0}
    assert set(body["top"][0]) == {
        "userId",
        "username",
        "email",
        "department",
        "score",
        "onTimeRate",
        "throughput",
        "completionRate",
        "pending",
        "overdueRate",
    }


def test_rankings_are_not_padded(client, seeded_store):
    body = client.get("/analytics/hr/scorecards/rankings", params={**WINDOW_PARAMS, "top": "10"}).json()
    assert len(body["top"]) == 3
    assert body["low"][0]["username"] == "carol"


def test_rankings_empty_cohort(client, seeded_store):
    body = client.get("/analytics/hr/scorecards/rankings", params={"department": "999"}).json()
    assert body == {"top": [], "low": [], "summary": {"count": 0}}


def test_department_rankings(client, seeded_store):
    body = client.get("/analytics/hr/scorecards/departments", params=WINDOW_PARAMS).json()
    assert [d["departmentName"] for d in body["items"]] == ["Engineering", "Sales"]
    assert body["items"][0]["avgScore"] == 74
    assert body["summary"] == {"count": 2, "avgScore": 49}


def test_my_scorecard(client, seeded_store):
    resp = client.get(
        "/analytics/hr/scorecards/me",
        params=WINDOW_PARAMS,
        headers={"X-USER-ID": str(seeded_store["alice"])},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["username"] == "alice"
    assert body["range"]["days"] == 28
    assert body["range"]["weeks"] == 4
    assert body["range"]["from"].startswith("2025-03-01")
    assert body["metrics"]["throughput"] == 0.75
    assert body["score"] == 73


def test_my_scorecard_requires_user(client, seeded_store):
    assert client.get("/analytics/hr/scorecards/me").status_code == 401


def test_my_scorecard_unknown_user(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/me", headers={"X-USER-ID": "424242"})
    assert resp.status_code == 404


def test_csv_export(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/employees.csv", params=WINDOW_PARAMS)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "hr-scorecards-company-2025-03-01-to-2025-03-29.csv" in resp.headers["content-disposition"]

    lines = resp.text.strip().split("\n")
    assert lines[0] == "username,email,department,score,onTimeRate,throughput,completionRate,pending,overdueRate"
    assert lines[1] == "alice,alice@example.com,Engineering,84,100,0.75,60,2,33"
    assert len(lines) == 4


def test_rankings_csv_export(client, seeded_store):
    resp = client.get("/analytics/hr/scorecards/rankings.csv", params={**WINDOW_PARAMS, "top": "2", "low": "1"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "employee-rankings-company-2025-03-01-to-2025-03-29.csv" in resp.headers["content-disposition"]

    lines = resp.text.strip().split("\n")
    assert lines == [
        "rankType,rank,username,email,department,score,onTimeRate,throughput,completionRate,overdueRate",
        "top,1,alice,alice@example.com,Engineering,84,100,0.75,60,33",
        "top,2,bob,bob@example.com,Engineering,64,50,0.50,100,0",
        "low,1,carol,carol@example.com,Sales,0,0,0.00,0,0",
    ]


def test_scope_failure_maps_to_502(monkeypatch):
    class BrokenDirectory:
        def list_active(self, department_id=None):
            raise ScopeResolutionError("directory offline")

        def get(self, employee_id):
            raise ScopeResolutionError("directory offline")

    class NoSource:
        def fetch(self, subject_id, window, now):
            raise AssertionError("should not be called")

    monkeypatch.setattr(settings, "SCORECARDS_SECRET", SECRET)
    application = create_app()
    broken = ScorecardService(ScopeResolver(BrokenDirectory()), SubjectMetricsFetcher(NoSource()))
    application.dependency_overrides[get_scorecard_service] = lambda: broken

    with TestClient(application, headers={"X-SCORECARDS-SECRET": SECRET}) as c:
        resp = c.get("/analytics/hr/scorecards/rankings")
    assert resp.status_code == 502
