from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .schemas import NormalizedRequest, Turn

PayloadParser = Callable[[Mapping[str, Any]], NormalizedRequest | None]


def content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return " ".join(item for item in parts if item)
    return ""


def _build(text: Any, history: list[Turn] | None = None) -> NormalizedRequest | None:
    cleaned = content_text(text).strip()
    if not cleaned:
        return None
    return NormalizedRequest(text=cleaned, history=history or [])


def sanitize_history(history: Iterable[Turn]) -> list[Turn]:
    turns = list(history)
    for index, turn in enumerate(turns):
        if turn.role == "user":
            return turns[index:]
    return []


def parse_text_field(payload: Mapping[str, Any]) -> NormalizedRequest | None:
    return _build(payload.get("text"))


def parse_input_messages(payload: Mapping[str, Any]) -> NormalizedRequest | None:
    items = payload.get("input")
    if not isinstance(items, list):
        return None

    valid = [
        item
        for item in items
        if isinstance(item, Mapping)
        and item.get("role") != "system"
        and content_text(item.get("content")).strip()
    ]
    if not valid:
        return None

    # The last entry is the current turn even when it is not tagged "user".
    current = valid[-1]
    history = [
        Turn(role="model" if item.get("role") == "assistant" else "user", text=content_text(item.get("content")))
        for item in valid[:-1]
    ]
    return _build(current.get("content"), history)


def parse_chat_messages(payload: Mapping[str, Any]) -> NormalizedRequest | None:
    items = payload.get("messages")
    if not isinstance(items, list) or not items:
        return None
    last = items[-1]
    if not isinstance(last, Mapping):
        return None
    return _build(last.get("content"))


def parse_prompt_field(payload: Mapping[str, Any]) -> NormalizedRequest | None:
    return _build(payload.get("prompt"))


PARSERS: tuple[PayloadParser, ...] = (
    parse_text_field,
    parse_input_messages,
    parse_chat_messages,
    parse_prompt_field,
)


def normalize_payload(payload: Any, parsers: Iterable[PayloadParser] = PARSERS) -> NormalizedRequest | None:
    """Return the canonical request for the first parser that finds usable text, or None."""
    if not isinstance(payload, Mapping):
        return None
    for parser in parsers:
        normalized = parser(payload)
        if normalized is not None:
            return NormalizedRequest(text=normalized.text, history=sanitize_history(normalized.history))
    return None
