from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query

from cero.core.credentials.store import CredentialStore
from cero.core.integrations.base import ActionServiceError, CalendarConnector, TaskConnector
from cero.core.settings import CeroSettings

from .deps import get_calendar_connector, get_credential_store, get_settings, get_task_connector

logger = logging.getLogger("cero.api.dashboard")
router = APIRouter()


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    monday = datetime.combine((now - timedelta(days=now.weekday())).date(), time.min, tzinfo=now.tzinfo)
    sunday_end = monday + timedelta(days=6, hours=23, minutes=59, seconds=59, microseconds=999000)
    return monday, sunday_end


async def _safe_list(name: str, fn: Callable[[], list[dict]]) -> list[dict]:
    try:
        return await asyncio.to_thread(fn)
    except ActionServiceError as exc:
        logger.warning("dashboard_source_failed", extra={"extra_fields": {"source": name, "error": str(exc)}})
        return []


@router.get("")
async def dashboard(
    user_id: str | None = Query(default=None, alias="userId"),
    store: CredentialStore = Depends(get_credential_store),
    calendar: CalendarConnector = Depends(get_calendar_connector),
    tasks: TaskConnector = Depends(get_task_connector),
    settings: CeroSettings = Depends(get_settings),
) -> dict[str, list[dict]]:
    credential = store.get(user_id or settings.default_identity)
    if credential is None:
        raise HTTPException(status_code=401, detail="User not authenticated")

    monday, sunday_end = week_bounds(datetime.now(tz=ZoneInfo(settings.google.timezone)))
    events, task_items = await asyncio.gather(
        _safe_list(
            "calendar",
            lambda: calendar.list_events(
                credential,
                time_min=monday.isoformat(),
                time_max=sunday_end.isoformat(),
                max_results=250,
            ),
        ),
        _safe_list("tasks", lambda: tasks.list_tasks(credential, show_completed=True, max_results=20)),
    )
    return {"events": events, "tasks": task_items}
