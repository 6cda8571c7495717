from __future__ import annotations

import logging
from typing import Callable

from cero.core.credentials.store import Credential
from cero.core.settings import GoogleSettings

from .base import TaskServiceError
from .google_auth import build_google_service

ServiceFactory = Callable[[str, str, Credential, GoogleSettings], object]

logger = logging.getLogger("cero.integrations.tasks")


class GoogleTasksConnector:
    def __init__(self, settings: GoogleSettings, service_factory: ServiceFactory = build_google_service) -> None:
        self.settings = settings
        self.service_factory = service_factory

    def _default_list_id(self, service) -> str | None:
        lists = service.tasklists().list(maxResults=1).execute()
        items = lists.get("items") or []
        if not items:
            return None
        return items[0]["id"]

    def list_tasks(self, credential: Credential, show_completed: bool = False, max_results: int = 10) -> list[dict]:
        try:
            service = self.service_factory("tasks", "v1", credential, self.settings)
            list_id = self._default_list_id(service)
            if list_id is None:
                return []
            response = service.tasks().list(tasklist=list_id, showCompleted=show_completed, maxResults=max_results).execute()
        except Exception as exc:
            logger.warning("tasks_list_failed", extra={"extra_fields": {"error": str(exc)}})
            raise TaskServiceError("Could not access the tasks.") from exc
        return list(response.get("items") or [])

    def complete_task(self, credential: Credential, task_title: str) -> str:
        needle = task_title.casefold()
        try:
            service = self.service_factory("tasks", "v1", credential, self.settings)
            list_id = self._default_list_id(service)
            if list_id is None:
                return f'I couldn\'t find a task matching "{task_title}".'
            pending = service.tasks().list(tasklist=list_id, showCompleted=False).execute().get("items") or []
            # Spoken titles are approximate, so the first substring match wins.
            match = next((task for task in pending if needle in (task.get("title") or "").casefold()), None)
            if match is None:
                return f'I couldn\'t find a task matching "{task_title}".'
            service.tasks().update(
                tasklist=list_id,
                task=match["id"],
                body={"id": match["id"], "status": "completed"},
            ).execute()
        except Exception as exc:
            logger.warning("tasks_complete_failed", extra={"extra_fields": {"error": str(exc)}})
            raise TaskServiceError("Could not complete the task.") from exc
        return f'Task "{match.get("title")}" marked as completed.'
