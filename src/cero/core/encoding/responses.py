from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

logger = logging.getLogger("cero.encoding")

DONE_FRAME = "data: [DONE]\n\n"
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def json_envelope(text: str) -> dict[str, str]:
    return {"response": text}


def sse_frame(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, separators=(',', ':'), ensure_ascii=False)}\n\n"


def _chunk(chunk_id: str, created: int, model: str, delta: dict[str, str], finish_reason: str | None) -> dict[str, Any]:
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def build_stream_frames(text: str, model: str, now: float | None = None) -> list[str]:
    """Content, terminal and sentinel frames; the whole text travels in one delta."""
    timestamp = time.time() if now is None else now
    chunk_id = f"chatcmpl-{int(timestamp * 1000)}"
    created = int(timestamp)
    return [
        sse_frame(_chunk(chunk_id, created, model, {"content": text}, None)),
        sse_frame(_chunk(chunk_id, created, model, {}, "stop")),
        DONE_FRAME,
    ]


async def stream_frames(text: str, model: str, delay_s: float = 0.05) -> AsyncIterator[str]:
    try:
        content, terminal, done = build_stream_frames(text, model)
        yield content
        # Receivers drop the stream if the terminal frame arrives back to back.
        await asyncio.sleep(delay_s)
        yield terminal
        yield done
    except Exception:  # noqa: BLE001
        # Headers are already out; end the stream instead of sending a new response.
        logger.exception("stream_failed")
