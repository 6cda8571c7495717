from __future__ import annotations

from cero.core.orchestration.normalizer import normalize_payload, sanitize_history
from cero.core.orchestration.schemas import Turn


def test_leading_model_turns_are_dropped() -> None:
    history = [
        Turn(role="model", text="Hi, I'm Cero"),
        Turn(role="model", text="How can I help?"),
        Turn(role="user", text="add a meeting"),
        Turn(role="model", text="When?"),
    ]

    assert [turn.text for turn in sanitize_history(history)] == ["add a meeting", "When?"]


def test_history_without_user_turns_is_empty() -> None:
    assert sanitize_history([Turn(role="model", text="greeting")]) == []


def test_sanitize_is_idempotent() -> None:
    history = [
        Turn(role="model", text="greeting"),
        Turn(role="user", text="one"),
        Turn(role="model", text="two"),
    ]

    once = sanitize_history(history)
    assert sanitize_history(once) == once


def test_normalized_history_starts_with_user_turn() -> None:
    normalized = normalize_payload(
        {
            "input": [
                {"role": "assistant", "content": "Hi, I'm Cero"},
                {"role": "user", "content": "what do I have today"},
                {"role": "assistant", "content": "Two meetings"},
                {"role": "user", "content": "thanks"},
            ]
        }
    )

    assert normalized is not None
    assert normalized.history[0].role == "user"
    assert [turn.text for turn in normalized.history] == ["what do I have today", "Two meetings"]
