from __future__ import annotations

import logging
from typing import Any

from . import replies
from .normalizer import normalize_payload
from .orchestrator import ConversationOrchestrator

logger = logging.getLogger("cero.pipeline")


async def respond(payload: Any, identity_key: str, orchestrator: ConversationOrchestrator) -> str:
    """Speakable reply for any inbound payload; failures never escape as exceptions."""
    try:
        normalized = normalize_payload(payload)
        if normalized is None:
            logger.info("no_text_in_payload", extra={"extra_fields": {"keys": sorted(payload) if isinstance(payload, dict) else []}})
            return replies.CLARIFY

        logger.info(
            "payload_normalized",
            extra={"extra_fields": {"text_len": len(normalized.text), "history_len": len(normalized.history)}},
        )
        outcome = await orchestrator.run(normalized.text, normalized.history, identity_key)
        return outcome.final_text
    except Exception:  # noqa: BLE001
        logger.exception("pipeline_failed")
        return replies.TECHNICAL_ERROR
