from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from cero.core.credentials.store import Credential
from cero.core.settings import GoogleSettings

from .base import CalendarServiceError
from .google_auth import build_google_service

ServiceFactory = Callable[[str, str, Credential, GoogleSettings], object]

logger = logging.getLogger("cero.integrations.calendar")


class GoogleCalendarConnector:
    def __init__(self, settings: GoogleSettings, service_factory: ServiceFactory = build_google_service) -> None:
        self.settings = settings
        self.service_factory = service_factory

    def _service(self, credential: Credential):
        return self.service_factory("calendar", "v3", credential, self.settings)

    def list_events(
        self,
        credential: Credential,
        time_min: str | None = None,
        time_max: str | None = None,
        max_results: int | None = None,
    ) -> list[dict]:
        params: dict[str, object] = {
            "calendarId": self.settings.calendar_id,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_min:
            params["timeMin"] = time_min
        if time_max:
            params["timeMax"] = time_max
        if max_results:
            params["maxResults"] = max_results
        if not time_min and not time_max:
            params["timeMin"] = datetime.now(timezone.utc).isoformat()
            params.setdefault("maxResults", 20)

        try:
            response = self._service(credential).events().list(**params).execute()
        except Exception as exc:
            logger.warning("calendar_list_failed", extra={"extra_fields": {"error": str(exc)}})
            raise CalendarServiceError("Could not access the calendar.") from exc

        logger.debug(
            "calendar_list_ok",
            extra={"extra_fields": {"count": len(response.get("items", [])), "time_min": params.get("timeMin"), "time_max": time_max}},
        )
        return list(response.get("items") or [])

    def create_event(self, credential: Credential, summary: str, start_time: str, end_time: str) -> str:
        body = {
            "summary": summary,
            "start": {"dateTime": start_time, "timeZone": self.settings.timezone},
            "end": {"dateTime": end_time, "timeZone": self.settings.timezone},
        }
        try:
            response = (
                self._service(credential)
                .events()
                .insert(calendarId=self.settings.calendar_id, body=body, fields="id,summary,start,end,htmlLink")
                .execute()
            )
        except Exception as exc:
            logger.warning("calendar_create_failed", extra={"extra_fields": {"error": str(exc), "summary": summary}})
            raise CalendarServiceError("Could not create the event.") from exc

        link = response.get("htmlLink") or ""
        logger.info("calendar_event_created", extra={"extra_fields": {"event_id": response.get("id")}})
        return f"Event created: {link}".strip()
