from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("cero.trace")


@dataclass
class Trace:
    turn_id: str
    identity_key: str | None = None
    events: list[dict[str, Any]] = field(default_factory=list)

    def emit(self, name: str, payload: dict[str, Any] | None = None) -> None:
        enriched_payload = dict(payload or {})
        enriched_payload.setdefault("turn_id", self.turn_id)
        if self.identity_key:
            enriched_payload.setdefault("identity_key", self.identity_key)
        self.events.append({"event": name, "payload": enriched_payload})
        logger.info(name, extra={"extra_fields": enriched_payload})
