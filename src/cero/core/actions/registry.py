from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from cero.core.credentials.store import Credential
from cero.core.integrations.base import CalendarConnector, TaskConnector
from cero.core.orchestration.replies import ACTION_NOT_RECOGNIZED, MISSING_EVENT_TIMES
from cero.core.orchestration.schemas import ActionRequest, ActionResult

from .formatting import format_events_for_model, format_tasks_for_model

logger = logging.getLogger("cero.actions")


class ActionName(str, Enum):
    CREATE_CALENDAR_EVENT = "create_calendar_event"
    LIST_CALENDAR_EVENTS = "list_calendar_events"
    LIST_TASKS = "list_tasks"
    COMPLETE_TASK = "complete_task"


TASK_ACTIONS = frozenset({ActionName.LIST_TASKS, ActionName.COMPLETE_TASK})

SUMMARY_KEYS = ("summary", "title", "name")
START_TIME_KEYS = ("startTime", "start_time", "start", "startDateTime")
END_TIME_KEYS = ("endTime", "end_time", "end", "endDateTime")
TIME_MIN_KEYS = ("timeMin", "time_min", "from")
TIME_MAX_KEYS = ("timeMax", "time_max", "to")
MAX_RESULTS_KEYS = ("maxResults", "max_results", "limit")
TASK_TITLE_KEYS = ("taskTitle", "task_title", "title")
SHOW_COMPLETED_KEYS = ("showCompleted", "show_completed")

DEFAULT_SUMMARY = "Untitled event"


class MissingArgumentError(ValueError):
    pass


def first_present(arguments: Mapping[str, Any], keys: tuple[str, ...], default: Any = None) -> Any:
    for key in keys:
        value = arguments.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().casefold() in {"true", "1", "yes", "on"}
    return bool(value)


def _tool_spec(name: str, description: str, properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


TOOL_SPECS: dict[ActionName, dict[str, Any]] = {
    ActionName.CREATE_CALENDAR_EVENT: _tool_spec(
        ActionName.CREATE_CALENDAR_EVENT.value,
        "Creates a new event in the user's Google Calendar.",
        {
            "summary": {"type": "string", "description": "Title of the event"},
            "startTime": {"type": "string", "description": "Start time in ISO 8601 format (YYYY-MM-DDTHH:mm:ss)"},
            "endTime": {"type": "string", "description": "End time in ISO 8601 format (YYYY-MM-DDTHH:mm:ss)"},
        },
        ["summary", "startTime", "endTime"],
    ),
    ActionName.LIST_CALENDAR_EVENTS: _tool_spec(
        ActionName.LIST_CALENDAR_EVENTS.value,
        "Lists upcoming events from the user's calendar.",
        {
            "timeMin": {"type": "string", "description": "Start time to fetch events from (ISO 8601). Defaults to now."},
            "timeMax": {"type": "string", "description": "End of the time range (ISO 8601)."},
            "maxResults": {"type": "integer", "description": "Maximum number of events to return."},
        },
        [],
    ),
    ActionName.LIST_TASKS: _tool_spec(
        ActionName.LIST_TASKS.value,
        "Lists tasks from the user's default task list.",
        {"showCompleted": {"type": "boolean", "description": "Include completed tasks."}},
        [],
    ),
    ActionName.COMPLETE_TASK: _tool_spec(
        ActionName.COMPLETE_TASK.value,
        "Marks the first pending task whose title contains the given text as completed.",
        {"taskTitle": {"type": "string", "description": "Part of the task title"}},
        ["taskTitle"],
    ),
}


class ActionRegistry:
    def __init__(
        self,
        calendar: CalendarConnector | None,
        tasks: TaskConnector | None = None,
        tasks_enabled: bool = False,
    ) -> None:
        self.calendar = calendar
        self.tasks = tasks
        self.tasks_enabled = tasks_enabled

    def enabled_actions(self) -> list[ActionName]:
        return [name for name in ActionName if self.tasks_enabled or name not in TASK_ACTIONS]

    def tool_specs(self) -> list[dict[str, Any]]:
        return [TOOL_SPECS[name] for name in self.enabled_actions()]

    def lookup(self, name: str) -> ActionName | None:
        try:
            action = ActionName(name)
        except ValueError:
            return None
        return action if action in self.enabled_actions() else None

    async def execute(self, request: ActionRequest, credential: Credential) -> ActionResult:
        action = self.lookup(request.name)
        if action is None:
            logger.warning("action_not_recognized", extra={"extra_fields": {"action": request.name}})
            return ActionResult(name=request.name, ok=False, text=ACTION_NOT_RECOGNIZED)

        try:
            text = await self._dispatch(action, request.arguments, credential)
        except MissingArgumentError as exc:
            logger.info("action_missing_arguments", extra={"extra_fields": {"action": action.value}})
            return ActionResult(name=action.value, ok=False, text=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "action_failed",
                extra={"extra_fields": {"action": action.value, "error": str(exc), "error_type": exc.__class__.__name__}},
            )
            return ActionResult(name=action.value, ok=False, text=f"Error executing the action: {exc}")
        logger.info("action_succeeded", extra={"extra_fields": {"action": action.value}})
        return ActionResult(name=action.value, ok=True, text=text)

    async def _dispatch(self, action: ActionName, arguments: Mapping[str, Any], credential: Credential) -> str:
        if action is ActionName.CREATE_CALENDAR_EVENT:
            start_time = first_present(arguments, START_TIME_KEYS)
            end_time = first_present(arguments, END_TIME_KEYS)
            if not start_time or not end_time:
                raise MissingArgumentError(MISSING_EVENT_TIMES)
            summary = first_present(arguments, SUMMARY_KEYS, DEFAULT_SUMMARY)
            return await asyncio.to_thread(
                self._require(self.calendar).create_event,
                credential,
                summary=str(summary),
                start_time=str(start_time),
                end_time=str(end_time),
            )

        if action is ActionName.LIST_CALENDAR_EVENTS:
            time_min = first_present(arguments, TIME_MIN_KEYS) or datetime.now(timezone.utc).isoformat()
            events = await asyncio.to_thread(
                self._require(self.calendar).list_events,
                credential,
                time_min=str(time_min),
                time_max=first_present(arguments, TIME_MAX_KEYS),
                max_results=_as_int(first_present(arguments, MAX_RESULTS_KEYS), 10),
            )
            return format_events_for_model(events)

        if action is ActionName.LIST_TASKS:
            tasks = await asyncio.to_thread(
                self._require(self.tasks).list_tasks,
                credential,
                show_completed=_as_bool(first_present(arguments, SHOW_COMPLETED_KEYS, False)),
            )
            return format_tasks_for_model(tasks)

        task_title = first_present(arguments, TASK_TITLE_KEYS)
        if not task_title:
            raise MissingArgumentError("Error: I need the name of the task to complete.")
        return await asyncio.to_thread(self._require(self.tasks).complete_task, credential, str(task_title))

    def _require(self, connector):
        if connector is None:
            raise RuntimeError("integration_unavailable")
        return connector
