from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

Role = Literal["user", "model"]


class Turn(BaseModel):
    role: Role
    text: str


class NormalizedRequest(BaseModel):
    text: str = Field(min_length=1)
    history: list[Turn] = Field(default_factory=list)


class ActionRequest(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    call_id: str | None = None


class ActionResult(BaseModel):
    name: str
    ok: bool
    text: str


class ModelReply(BaseModel):
    text: str | None = None
    action_request: ActionRequest | None = None

    @property
    def is_empty(self) -> bool:
        return self.action_request is None and not (self.text or "").strip()


class TurnState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    AWAITING_ACTION = "awaiting_action"
    AWAITING_FINAL = "awaiting_final"
    DONE = "done"


@dataclass
class OrchestrationOutcome:
    final_text: str
    trace_events: list[dict[str, Any]] = field(default_factory=list)
