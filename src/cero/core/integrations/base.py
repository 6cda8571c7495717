from __future__ import annotations

from typing import Protocol

from cero.core.credentials.store import Credential


class ActionServiceError(RuntimeError):
    pass


class CalendarServiceError(ActionServiceError):
    pass


class TaskServiceError(ActionServiceError):
    pass


class CalendarConnector(Protocol):
    def list_events(
        self,
        credential: Credential,
        time_min: str | None = None,
        time_max: str | None = None,
        max_results: int | None = None,
    ) -> list[dict]: ...

    def create_event(self, credential: Credential, summary: str, start_time: str, end_time: str) -> str: ...


class TaskConnector(Protocol):
    def list_tasks(self, credential: Credential, show_completed: bool = False, max_results: int = 10) -> list[dict]: ...

    def complete_task(self, credential: Credential, task_title: str) -> str: ...
