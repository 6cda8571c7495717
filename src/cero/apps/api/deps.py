from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import Request

from cero.core.actions.registry import ActionRegistry
from cero.core.credentials.store import CredentialStore, FileCredentialStore, InMemoryCredentialStore
from cero.core.integrations.base import CalendarConnector, TaskConnector
from cero.core.integrations.google_calendar import GoogleCalendarConnector
from cero.core.integrations.google_tasks import GoogleTasksConnector
from cero.core.models.llm_provider import CeroLLM
from cero.core.orchestration.orchestrator import ConversationOrchestrator
from cero.core.settings import CeroSettings
from cero.core.settings import get_settings as _load_settings

IDENTITY_HEADER = "X-User-Id"
IDENTITY_QUERY = "userId"


def get_settings() -> CeroSettings:
    return _load_settings()


@lru_cache(maxsize=1)
def get_credential_store() -> CredentialStore:
    settings = get_settings()
    if settings.credential_store == "file":
        return FileCredentialStore(state_dir=settings.state_dir)
    return InMemoryCredentialStore()


@lru_cache(maxsize=1)
def get_calendar_connector() -> CalendarConnector:
    return GoogleCalendarConnector(settings=get_settings().google)


@lru_cache(maxsize=1)
def get_task_connector() -> TaskConnector:
    return GoogleTasksConnector(settings=get_settings().google)


@lru_cache(maxsize=1)
def get_llm() -> CeroLLM:
    settings = get_settings()
    return CeroLLM(settings=settings.llm, timezone=settings.google.timezone)


@lru_cache(maxsize=1)
def get_action_registry() -> ActionRegistry:
    return ActionRegistry(
        calendar=get_calendar_connector(),
        tasks=get_task_connector(),
        tasks_enabled=get_settings().tasks_enabled,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> ConversationOrchestrator:
    return ConversationOrchestrator(
        credential_store=get_credential_store(),
        llm=get_llm(),
        actions=get_action_registry(),
        turn_timeout_s=get_settings().turn_timeout_s,
    )


def get_identity_key(request: Request) -> str:
    return (
        request.headers.get(IDENTITY_HEADER)
        or request.query_params.get(IDENTITY_QUERY)
        or get_settings().default_identity
    )


def reset_caches() -> None:
    for provider in (
        _load_settings,
        get_credential_store,
        get_calendar_connector,
        get_task_connector,
        get_llm,
        get_action_registry,
        get_orchestrator,
    ):
        provider.cache_clear()


async def read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return {}
