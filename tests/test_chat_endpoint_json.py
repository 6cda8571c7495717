from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cero.apps.api import deps
from cero.apps.api.main import app
from cero.core.actions.registry import ActionRegistry
from cero.core.credentials.store import Credential, InMemoryCredentialStore
from cero.core.orchestration import replies
from cero.core.orchestration.orchestrator import ConversationOrchestrator
from cero.core.orchestration.schemas import ModelReply


class EchoSession:
    def __init__(self, seen: list) -> None:
        self.seen = seen

    async def converse(self, text):
        self.seen.append(text)
        return ModelReply(text=f"You said: **{text}**")

    async def resubmit_action_result(self, request, result_text):
        raise AssertionError("no action expected")


class EchoLLM:
    def __init__(self) -> None:
        self.seen: list[str] = []

    @property
    def is_configured(self) -> bool:
        return True

    def start_session(self, history, tools):
        return EchoSession(self.seen)


class ExplodingOrchestrator:
    async def run(self, text, history, identity_key):
        raise RuntimeError("unexpected")


@pytest.fixture
def llm() -> EchoLLM:
    return EchoLLM()


@pytest.fixture
def client(llm):
    store = InMemoryCredentialStore()
    store.set("alice", Credential(access_token="token"))
    orchestrator = ConversationOrchestrator(credential_store=store, llm=llm, actions=ActionRegistry(calendar=None))
    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_chat_returns_json_envelope(client, llm) -> None:
    response = client.post("/chat/", json={"messages": [{"role": "user", "content": "what's on today"}]})

    assert response.status_code == 200
    assert response.json() == {"response": "You said: what's on today"}
    assert llm.seen == ["what's on today"]
    assert response.headers["X-Correlation-ID"]


def test_chat_blank_payload_asks_to_repeat(client, llm) -> None:
    response = client.post("/chat/", json={"text": "   "})

    assert response.status_code == 200
    assert response.json() == {"response": replies.CLARIFY}
    assert llm.seen == []


def test_chat_invalid_json_asks_to_repeat(client) -> None:
    response = client.post("/chat/", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 200
    assert response.json() == {"response": replies.CLARIFY}


def test_chat_internal_failure_still_returns_200(client) -> None:
    app.dependency_overrides[deps.get_orchestrator] = lambda: ExplodingOrchestrator()

    response = client.post("/chat/", json={"text": "hello"})

    assert response.status_code == 200
    assert response.json() == {"response": replies.TECHNICAL_ERROR}


def test_chat_without_credentials_prompts_sign_in(llm) -> None:
    orchestrator = ConversationOrchestrator(
        credential_store=InMemoryCredentialStore(),
        llm=llm,
        actions=ActionRegistry(calendar=None),
    )
    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    try:
        with TestClient(app) as client:
            response = client.post("/chat/", json={"text": "hello"}, headers={"X-User-Id": "bob"})
    finally:
        app.dependency_overrides.clear()

    assert response.json() == {"response": replies.SIGN_IN}
    assert llm.seen == []


def test_root_and_healthz(client) -> None:
    assert client.get("/").text == "Cero backend is running!"
    assert client.get("/healthz").json() == {"ok": True}
