from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from cero.core.actions.formatting import format_events_for_speech
from cero.core.actions.registry import (
    DEFAULT_SUMMARY,
    END_TIME_KEYS,
    START_TIME_KEYS,
    SUMMARY_KEYS,
    TIME_MAX_KEYS,
    TIME_MIN_KEYS,
    first_present,
)
from cero.core.credentials.store import CredentialStore, resolve_credential
from cero.core.integrations.base import CalendarConnector
from cero.core.orchestration.replies import ACTION_NOT_RECOGNIZED, MISSING_EVENT_TIMES
from cero.core.settings import CeroSettings

from .deps import get_calendar_connector, get_credential_store, get_identity_key, get_settings, read_payload

logger = logging.getLogger("cero.api.tools")
router = APIRouter()

NOT_SIGNED_IN = "Error: you are not signed in to Cero. Please open the web app and connect your calendar."
TOOL_TECHNICAL_ERROR = "There was a technical error on the Cero server."

LIST_ACTIONS = {"list_events", "list_calendar_events"}
CREATE_ACTIONS = {"create_event", "create_calendar_event"}


@router.post("/calendar")
async def calendar_tool(
    request: Request,
    identity_key: str = Depends(get_identity_key),
    store: CredentialStore = Depends(get_credential_store),
    calendar: CalendarConnector = Depends(get_calendar_connector),
    settings: CeroSettings = Depends(get_settings),
) -> JSONResponse:
    body = await read_payload(request)
    if not isinstance(body, dict):
        body = {}

    credential = resolve_credential(store, identity_key)
    if credential is None:
        logger.info("tool_credential_missing")
        return JSONResponse(status_code=401, content={"result": NOT_SIGNED_IN})

    action = body.get("action")
    logger.info("tool_request", extra={"extra_fields": {"action": action, "keys": sorted(body)}})
    try:
        if action in LIST_ACTIONS:
            events = await asyncio.to_thread(
                calendar.list_events,
                credential,
                time_min=first_present(body, TIME_MIN_KEYS) or datetime.now(timezone.utc).isoformat(),
                time_max=first_present(body, TIME_MAX_KEYS),
            )
            result = format_events_for_speech(events, settings.google.timezone)
        elif action in CREATE_ACTIONS:
            start_time = first_present(body, START_TIME_KEYS)
            end_time = first_present(body, END_TIME_KEYS)
            if not start_time or not end_time:
                logger.warning("tool_missing_event_times")
                return JSONResponse(content={"result": MISSING_EVENT_TIMES})
            result = await asyncio.to_thread(
                calendar.create_event,
                credential,
                summary=str(first_present(body, SUMMARY_KEYS, DEFAULT_SUMMARY)),
                start_time=str(start_time),
                end_time=str(end_time),
            )
        else:
            result = ACTION_NOT_RECOGNIZED
    except Exception:  # noqa: BLE001
        logger.exception("tool_failed", extra={"extra_fields": {"action": action}})
        return JSONResponse(status_code=500, content={"result": TOOL_TECHNICAL_ERROR})

    return JSONResponse(content={"result": result})
