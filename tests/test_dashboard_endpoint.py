from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from cero.apps.api import deps
from cero.apps.api.main import app
from cero.apps.api.routes_dashboard import week_bounds
from cero.core.credentials.store import Credential, InMemoryCredentialStore
from cero.core.integrations.base import TaskServiceError


class MockCalendarConnector:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def list_events(self, credential, time_min=None, time_max=None, max_results=None):
        self.calls.append({"time_min": time_min, "time_max": time_max, "max_results": max_results})
        return [{"summary": "Standup"}]

    def create_event(self, credential, summary, start_time, end_time):
        raise AssertionError("not used")


class MockTaskConnector:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict] = []

    def list_tasks(self, credential, show_completed=False, max_results=10):
        if self.fail:
            raise TaskServiceError("Could not access the tasks.")
        self.calls.append({"show_completed": show_completed})
        return [{"title": "Buy milk", "status": "completed"}]

    def complete_task(self, credential, task_title):
        raise AssertionError("not used")


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


def _client(calendar, tasks, identities=("demo-user",)) -> TestClient:
    store = InMemoryCredentialStore()
    for identity in identities:
        store.set(identity, Credential(access_token="token"))
    app.dependency_overrides[deps.get_credential_store] = lambda: store
    app.dependency_overrides[deps.get_calendar_connector] = lambda: calendar
    app.dependency_overrides[deps.get_task_connector] = lambda: tasks
    return TestClient(app)


def test_week_bounds_monday_to_sunday() -> None:
    zone = ZoneInfo("America/Argentina/Buenos_Aires")

    monday, sunday_end = week_bounds(datetime(2024, 1, 3, 15, 45, tzinfo=zone))

    assert monday == datetime(2024, 1, 1, 0, 0, tzinfo=zone)
    assert sunday_end == datetime(2024, 1, 7, 23, 59, 59, 999000, tzinfo=zone)


def test_dashboard_returns_week_events_and_tasks() -> None:
    calendar, tasks = MockCalendarConnector(), MockTaskConnector()

    response = _client(calendar, tasks).get("/api/dashboard")

    assert response.status_code == 200
    assert response.json() == {"events": [{"summary": "Standup"}], "tasks": [{"title": "Buy milk", "status": "completed"}]}
    assert calendar.calls[0]["max_results"] == 250
    assert datetime.fromisoformat(calendar.calls[0]["time_min"]).weekday() == 0
    assert tasks.calls == [{"show_completed": True}]


def test_dashboard_requires_exact_identity() -> None:
    response = _client(MockCalendarConnector(), MockTaskConnector(), identities=("alice",)).get("/api/dashboard?userId=bob")

    assert response.status_code == 401
    assert response.json() == {"detail": "User not authenticated"}


def test_dashboard_degrades_failed_source_to_empty_list() -> None:
    response = _client(MockCalendarConnector(), MockTaskConnector(fail=True), identities=("alice",)).get(
        "/api/dashboard?userId=alice"
    )

    assert response.status_code == 200
    assert response.json() == {"events": [{"summary": "Standup"}], "tasks": []}
