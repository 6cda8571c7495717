from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from cero.core.orchestration.replies import NO_PENDING_TASKS, NO_UPCOMING_EVENTS


def _event_start(event: dict) -> tuple[str | None, str | None]:
    start = event.get("start") or {}
    return start.get("dateTime"), start.get("date")


def format_events_for_model(events: list[dict]) -> str:
    if not events:
        return NO_UPCOMING_EVENTS
    lines = []
    for event in events:
        date_time, date = _event_start(event)
        lines.append(f"{date_time or date or ''} - {event.get('summary') or '(untitled)'}")
    return "\n".join(lines)


def format_events_for_speech(events: list[dict], timezone: str) -> str:
    if not events:
        return "I couldn't find any events in your calendar for those dates."
    zone = ZoneInfo(timezone)
    lines = ["Here are your events:"]
    for event in events:
        date_time, _ = _event_start(event)
        when = "all day"
        if date_time:
            try:
                when = datetime.fromisoformat(date_time.replace("Z", "+00:00")).astimezone(zone).strftime("%H:%M")
            except ValueError:
                when = date_time
        lines.append(f"- {event.get('summary') or '(untitled)'} at {when}")
    return "\n".join(lines)


def format_tasks_for_model(tasks: list[dict]) -> str:
    if not tasks:
        return NO_PENDING_TASKS
    return "\n".join(
        f"[{'x' if task.get('status') == 'completed' else ' '}] {task.get('title') or '(untitled)'}" for task in tasks
    )
