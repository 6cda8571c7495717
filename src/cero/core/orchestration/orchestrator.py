from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from cero.core.actions.registry import ActionRegistry
from cero.core.credentials.store import Credential, CredentialStore, resolve_credential
from cero.core.logging.context import log_context
from cero.core.models.llm_provider import LanguageModel
from cero.core.observability.trace import Trace

from . import replies
from .schemas import ActionResult, OrchestrationOutcome, Turn, TurnState
from .speech import clean_speech_text

logger = logging.getLogger("cero.orchestrator")


class ConversationOrchestrator:
    """Runs one model turn: at most one action, bounded by ``turn_timeout_s``.

    A second action request after the action result is never executed; a
    reply carrying only that request counts as a reply with no text.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        llm: LanguageModel,
        actions: ActionRegistry,
        turn_timeout_s: float = 5.0,
    ) -> None:
        self.credential_store = credential_store
        self.llm = llm
        self.actions = actions
        self.turn_timeout_s = turn_timeout_s

    async def run(self, text: str, history: list[Turn], identity_key: str) -> OrchestrationOutcome:
        trace = Trace(turn_id=str(uuid4()), identity_key=identity_key)
        with log_context(turn_id=trace.turn_id, identity_key=identity_key):
            return await self._run(text, history, identity_key, trace)

    async def _run(self, text: str, history: list[Turn], identity_key: str, trace: Trace) -> OrchestrationOutcome:
        trace.emit("TurnStarted", {"history_len": len(history), "text_len": len(text)})

        credential = resolve_credential(self.credential_store, identity_key)
        if credential is None:
            trace.emit("CredentialMissing")
            return self._finish(replies.SIGN_IN, trace)

        if not self.llm.is_configured:
            trace.emit("ModelNotConfigured")
            return self._finish(replies.NOT_CONFIGURED, trace)

        try:
            # wait_for cancels the turn on expiry, aborting the in-flight model request.
            final_text = await asyncio.wait_for(self._run_with_retry(text, history, credential, trace), self.turn_timeout_s)
        except asyncio.TimeoutError:
            trace.emit("TurnTimedOut", {"timeout_s": self.turn_timeout_s})
            return self._finish(replies.TAKING_LONGER, trace)

        return self._finish(final_text, trace)

    async def _run_with_retry(self, text: str, history: list[Turn], credential: Credential, trace: Trace) -> str:
        executed: dict[str, ActionResult] = {}
        try:
            return await self._run_turn(text, history, credential, trace, executed)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "model_turn_failed",
                exc_info=True,
                extra={"extra_fields": {"error_type": exc.__class__.__name__, "stateless": not history}},
            )
            trace.emit("TurnFailed", {"error_type": exc.__class__.__name__, "history_len": len(history)})
            if not history:
                return replies.BRAIN_ERROR

        trace.emit("StatelessRetryStarted", {"executed_actions": sorted(executed)})
        try:
            return await self._run_turn(text, [], credential, trace, executed)
        except Exception as exc:  # noqa: BLE001
            logger.error("stateless_retry_failed", exc_info=True, extra={"extra_fields": {"error_type": exc.__class__.__name__}})
            trace.emit("StatelessRetryFailed", {"error_type": exc.__class__.__name__})
            return replies.SERIOUS_TROUBLE

    async def _run_turn(
        self,
        text: str,
        history: list[Turn],
        credential: Credential,
        trace: Trace,
        executed: dict[str, ActionResult],
    ) -> str:
        state = TurnState.AWAITING_MODEL
        trace.emit("StateChanged", {"state": state.value})
        session = self.llm.start_session(history, self.actions.tool_specs())
        reply = await session.converse(text)

        if reply.action_request is not None:
            request = reply.action_request
            state = TurnState.AWAITING_ACTION
            trace.emit("StateChanged", {"state": state.value, "action": request.name})
            # An action already run in this turn is never dispatched twice; the retry reuses its result.
            result = executed.get(request.name)
            if result is None:
                result = await self.actions.execute(request, credential)
                executed[request.name] = result
                trace.emit("ActionCompleted", {"action": result.name, "ok": result.ok})
            else:
                trace.emit("ActionReused", {"action": result.name, "ok": result.ok})

            state = TurnState.AWAITING_FINAL
            trace.emit("StateChanged", {"state": state.value})
            reply = await session.resubmit_action_result(request, result.text)

        state = TurnState.DONE
        trace.emit("StateChanged", {"state": state.value})
        if reply.is_empty:
            return replies.NO_CANDIDATES
        if not (reply.text or "").strip():
            logger.warning("action_after_action_result_ignored", extra={"extra_fields": {"action": reply.action_request.name}})
            return replies.NO_CANDIDATES
        return reply.text

    def _finish(self, text: str, trace: Trace) -> OrchestrationOutcome:
        final_text = clean_speech_text(text)
        trace.emit("TurnCompleted", {"final_len": len(final_text)})
        return OrchestrationOutcome(final_text=final_text, trace_events=trace.events)
