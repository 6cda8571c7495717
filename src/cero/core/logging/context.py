from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
identity_key_var: ContextVar[str | None] = ContextVar("identity_key", default=None)
route_var: ContextVar[str | None] = ContextVar("route", default=None)
turn_id_var: ContextVar[str | None] = ContextVar("turn_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "correlation_id": correlation_id_var,
    "identity_key": identity_key_var,
    "route": route_var,
    "turn_id": turn_id_var,
}


def set_context(**kwargs: str | None) -> dict[str, Token[str | None]]:
    tokens: dict[str, Token[str | None]] = {}
    for key, value in kwargs.items():
        var = _CONTEXT_VARS.get(key)
        if var is None:
            continue
        tokens[key] = var.set(value)
    return tokens


def reset_context(tokens: dict[str, Token[str | None]]) -> None:
    for key, token in tokens.items():
        var = _CONTEXT_VARS.get(key)
        if var is not None:
            var.reset(token)


@contextmanager
def log_context(
    correlation_id: str | None = None,
    identity_key: str | None = None,
    route: str | None = None,
    turn_id: str | None = None,
) -> Iterator[None]:
    values = {"correlation_id": correlation_id, "identity_key": identity_key, "route": route, "turn_id": turn_id}
    # Only override what the caller passed so nested blocks keep outer values.
    tokens = set_context(**{key: value for key, value in values.items() if value is not None})
    try:
        yield
    finally:
        reset_context(tokens)


def get_log_context() -> dict[str, str]:
    values = {key: var.get() for key, var in _CONTEXT_VARS.items()}
    return {key: value for key, value in values.items() if value is not None}
