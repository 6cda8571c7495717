from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cero.apps.api import deps
from cero.apps.api.main import app
from cero.core.credentials.store import Credential, InMemoryCredentialStore
from cero.core.integrations.base import CalendarServiceError
from cero.core.orchestration import replies


class MockCalendarConnector:
    def __init__(self, events: list[dict] | None = None, fail: bool = False) -> None:
        self.events = events or []
        self.fail = fail
        self.created: list[dict] = []
        self.list_calls: list[dict] = []

    def list_events(self, credential, time_min=None, time_max=None, max_results=None):
        if self.fail:
            raise CalendarServiceError("Could not access the calendar.")
        self.list_calls.append({"time_min": time_min, "time_max": time_max})
        return self.events

    def create_event(self, credential, summary, start_time, end_time):
        self.created.append({"summary": summary, "start_time": start_time, "end_time": end_time})
        return "Event created: https://www.google.com/calendar/event?eid=abc"


def _client(calendar: MockCalendarConnector, signed_in: bool = True) -> TestClient:
    store = InMemoryCredentialStore()
    if signed_in:
        store.set("demo-user", Credential(access_token="token"))
    app.dependency_overrides[deps.get_credential_store] = lambda: store
    app.dependency_overrides[deps.get_calendar_connector] = lambda: calendar
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


def test_not_signed_in_returns_401() -> None:
    response = _client(MockCalendarConnector(), signed_in=False).post("/api/tools/calendar", json={"action": "list_events"})

    assert response.status_code == 401
    assert response.json() == {
        "result": "Error: you are not signed in to Cero. Please open the web app and connect your calendar."
    }


def test_list_events_reads_times_in_local_zone() -> None:
    calendar = MockCalendarConnector(
        events=[
            {"summary": "Standup", "start": {"dateTime": "2024-01-01T09:30:00-03:00"}},
            {"summary": "Holiday", "start": {"date": "2024-01-01"}},
        ]
    )

    response = _client(calendar).post(
        "/api/tools/calendar",
        json={"action": "list_events", "timeMin": "2024-01-01T00:00:00-03:00", "time_max": "2024-01-02T00:00:00-03:00"},
    )

    assert response.status_code == 200
    assert response.json() == {"result": "Here are your events:\n- Standup at 09:30\n- Holiday at all day"}
    assert calendar.list_calls == [{"time_min": "2024-01-01T00:00:00-03:00", "time_max": "2024-01-02T00:00:00-03:00"}]


def test_list_events_empty() -> None:
    response = _client(MockCalendarConnector()).post("/api/tools/calendar", json={"action": "list_events"})

    assert response.json() == {"result": "I couldn't find any events in your calendar for those dates."}


def test_create_event_with_aliases() -> None:
    calendar = MockCalendarConnector()

    response = _client(calendar).post(
        "/api/tools/calendar",
        json={"action": "create_event", "title": "Lunch", "start": "2024-01-01T13:00:00", "end_time": "2024-01-01T14:00:00"},
    )

    assert response.status_code == 200
    assert response.json() == {"result": "Event created: https://www.google.com/calendar/event?eid=abc"}
    assert calendar.created == [{"summary": "Lunch", "start_time": "2024-01-01T13:00:00", "end_time": "2024-01-01T14:00:00"}]


def test_create_event_missing_times() -> None:
    calendar = MockCalendarConnector()

    response = _client(calendar).post("/api/tools/calendar", json={"action": "create_event", "summary": "Lunch"})

    assert response.status_code == 200
    assert response.json() == {"result": replies.MISSING_EVENT_TIMES}
    assert calendar.created == []


def test_unknown_action() -> None:
    response = _client(MockCalendarConnector()).post("/api/tools/calendar", json={"action": "delete_event"})

    assert response.json() == {"result": replies.ACTION_NOT_RECOGNIZED}


def test_service_failure_returns_500() -> None:
    response = _client(MockCalendarConnector(fail=True)).post("/api/tools/calendar", json={"action": "list_events"})

    assert response.status_code == 500
    assert response.json() == {"result": "There was a technical error on the Cero server."}
