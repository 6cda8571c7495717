from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol

import httpx

from cero.core.orchestration.schemas import ActionRequest, ModelReply, Turn
from cero.core.settings import LLMSettings

from .llm_openai_compat import OpenAICompatClient
from .prompts import system_prompt

logger = logging.getLogger("cero.llm")


class LLMError(RuntimeError):
    pass


class LLMUnavailable(LLMError):
    pass


class LLMOutputError(LLMError):
    pass


class ChatSession(Protocol):
    async def converse(self, text: str) -> ModelReply: ...

    async def resubmit_action_result(self, request: ActionRequest, result_text: str) -> ModelReply: ...


class LanguageModel(Protocol):
    @property
    def is_configured(self) -> bool: ...

    def start_session(self, history: list[Turn], tools: list[dict[str, Any]]) -> ChatSession: ...


def history_messages(history: list[Turn]) -> list[dict[str, Any]]:
    return [{"role": "assistant" if turn.role == "model" else "user", "content": turn.text} for turn in history]


def parse_completion(data: dict[str, Any]) -> tuple[ModelReply, dict[str, Any] | None]:
    """Turn a chat completion body into a reply plus the assistant message to echo back."""
    choices = data.get("choices") or []
    if not choices:
        return ModelReply(), None
    message = choices[0].get("message") or {}
    if not isinstance(message, dict):
        raise LLMOutputError("Completion message is not an object")

    tool_calls = message.get("tool_calls") or []
    function_calls = [call for call in tool_calls if isinstance(call, dict) and call.get("function")]
    if function_calls:
        if len(function_calls) > 1:
            logger.warning("extra_tool_calls_ignored", extra={"extra_fields": {"count": len(function_calls) - 1}})
        first = function_calls[0]
        raw_arguments = first["function"].get("arguments") or "{}"
        try:
            arguments = json.loads(raw_arguments) if isinstance(raw_arguments, str) else dict(raw_arguments)
        except (json.JSONDecodeError, TypeError, ValueError):
            arguments = {}
        if not isinstance(arguments, dict):
            arguments = {}
        request = ActionRequest(name=str(first["function"].get("name") or ""), arguments=arguments, call_id=first.get("id"))
        echoed = {"role": "assistant", "content": message.get("content"), "tool_calls": [first]}
        return ModelReply(text=message.get("content"), action_request=request), echoed

    content = message.get("content")
    return ModelReply(text=str(content) if content else None), {"role": "assistant", "content": content or ""}


class OpenAIChatSession:
    def __init__(
        self,
        client: OpenAICompatClient,
        settings: LLMSettings,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> None:
        self.client = client
        self.settings = settings
        self.messages = messages
        self.tools = tools

    async def converse(self, text: str) -> ModelReply:
        self.messages.append({"role": "user", "content": text})
        return await self._complete(self.tools, mode="converse")

    async def resubmit_action_result(self, request: ActionRequest, result_text: str) -> ModelReply:
        self.messages.append(
            {
                "role": "tool",
                "tool_call_id": request.call_id or request.name,
                "name": request.name,
                "content": result_text,
            }
        )
        # No tools on the follow-up: one action per turn.
        return await self._complete(None, mode="action_result")

    async def _complete(self, tools: list[dict[str, Any]] | None, mode: str) -> ModelReply:
        start = time.perf_counter()
        ok = False
        try:
            data = await self.client.chat_completion(
                messages=self.messages,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                tools=tools,
            )
            reply, echoed = parse_completion(data)
            if echoed is not None:
                self.messages.append(echoed)
            ok = True
            return reply
        except httpx.HTTPError as exc:
            raise LLMUnavailable(f"LLM request failed: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise LLMOutputError(f"Could not parse LLM response: {exc}") from exc
        finally:
            logger.info(
                "llm_call",
                extra={
                    "extra_fields": {
                        "model": self.settings.model,
                        "mode": mode,
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                        "ok": ok,
                        "message_count": len(self.messages),
                    }
                },
            )


class CeroLLM:
    def __init__(self, settings: LLMSettings, timezone: str, client: OpenAICompatClient | None = None) -> None:
        self.settings = settings
        self.timezone = timezone
        self._client = client or OpenAICompatClient(
            url=settings.url,
            model=settings.model,
            api_key=settings.api_key,
            timeout_s=settings.timeout_s,
        )

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    def start_session(self, history: list[Turn], tools: list[dict[str, Any]]) -> OpenAIChatSession:
        if not self.is_configured:
            raise LLMUnavailable("LLM provider is off")
        messages = [{"role": "system", "content": system_prompt(self.timezone)}, *history_messages(history)]
        return OpenAIChatSession(self._client, self.settings, messages, tools)
