from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from cero.core.encoding.responses import STREAM_HEADERS, stream_frames
from cero.core.logging.context import log_context
from cero.core.orchestration.orchestrator import ConversationOrchestrator
from cero.core.orchestration.pipeline import respond
from cero.core.settings import CeroSettings

from .deps import get_identity_key, get_orchestrator, get_settings, read_payload

router = APIRouter()


@router.post("/elevenlabs")
@router.post("/")
async def webhook(
    request: Request,
    identity_key: str = Depends(get_identity_key),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
    settings: CeroSettings = Depends(get_settings),
) -> StreamingResponse:
    payload = await read_payload(request)
    with log_context(identity_key=identity_key, route="webhook"):
        text = await respond(payload, identity_key, orchestrator)
    return StreamingResponse(
        stream_frames(text, model=settings.stream_model_name, delay_s=settings.stream_frame_delay_s),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
