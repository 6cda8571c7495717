from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from cero.core.encoding.responses import json_envelope
from cero.core.logging.context import log_context
from cero.core.orchestration.orchestrator import ConversationOrchestrator
from cero.core.orchestration.pipeline import respond

from .deps import get_identity_key, get_orchestrator, read_payload

router = APIRouter()


@router.post("/")
async def chat(
    request: Request,
    identity_key: str = Depends(get_identity_key),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> dict[str, str]:
    payload = await read_payload(request)
    with log_context(identity_key=identity_key, route="chat"):
        text = await respond(payload, identity_key, orchestrator)
    return json_envelope(text)
