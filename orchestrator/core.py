"""
AnswerOrchestrator - sequential fallback across the model pool.

Key guarantees:
- The domain system instruction is always the single first message
- Candidates are tried strictly in pool order, one request in flight at a time
- Candidate-level failures never escape; callers only see Answer, Exhausted or FatalError
- Cancelling the calling task cancels the in-flight request and stops the chain
"""

import asyncio
import time
import uuid
from typing import Any, Iterable

from api.base_client import BaseCompletionClient
from models.messages import Context, Message, Role
from models.outcomes import (
    Answer,
    AttemptRecord,
    Exhausted,
    Failure,
    FailureKind,
    FatalError,
    FatalReason,
    FinalOutcome,
)
from orchestrator import prompt_builder
from orchestrator.errors import (
    CallerSystemMessageError,
    EmptyConversationError,
    InvalidContextError,
    OrchestratorError,
)
from orchestrator.fallback_manager import FallbackManager, FallbackPolicy
from orchestrator.model_pool import ModelPool
from orchestrator.routing_types import NextAction
from utils.logger import get_logger

logger = get_logger(__name__)

EXHAUSTED_MESSAGE = (
    "Mohon maaf, saat ini belum ada sumber yang dapat menjawab pertanyaan Anda. "
    "Silakan coba lagi beberapa saat lagi."
)
CONFIGURATION_MESSAGE = (
    "Mohon maaf, layanan tanya jawab sedang mengalami masalah konfigurasi. "
    "Tim kami akan segera memperbaikinya."
)
INVALID_REQUEST_MESSAGE = "Permintaan tidak valid. Periksa kembali pertanyaan dan konteks yang dikirim."


def user_message(outcome: FinalOutcome) -> str:
    """User-presentable text for an outcome; never contains provider error detail."""
    if isinstance(outcome, Answer):
        return outcome.text
    if isinstance(outcome, Exhausted):
        return EXHAUSTED_MESSAGE
    if outcome.reason.is_configuration:
        return CONFIGURATION_MESSAGE
    return INVALID_REQUEST_MESSAGE


def to_payload(outcome: FinalOutcome) -> dict[str, Any]:
    if isinstance(outcome, Answer):
        return {"success": True, "content": outcome.text}
    return {"success": False, "error": user_message(outcome)}


class AnswerOrchestrator:
    def __init__(
        self,
        pool: ModelPool,
        client: BaseCompletionClient,
        api_key: str | None,
        policy: FallbackPolicy | None = None,
        fallback_manager: FallbackManager | None = None,
    ):
        self._pool = pool
        self._client = client
        self._api_key = api_key
        self._policy = policy or FallbackPolicy.from_defaults(pool.routing_defaults())
        self._fallback_manager = fallback_manager or FallbackManager()

    @classmethod
    def from_config(cls, config) -> "AnswerOrchestrator":
        from api.openrouter_client import OpenRouterClient
        from orchestrator.answer_normalizer import AnswerNormalizer

        pool = config.load_model_pool()
        policy = config.fallback_policy(pool)
        thresholds = pool.routing_defaults().get("thresholds", {})
        client = OpenRouterClient(
            api_key=config.OPENROUTER_API_KEY,
            base_url=config.OPENROUTER_BASE_URL,
            timeout_s=policy.attempt_timeout_s,
            referer=config.OPENROUTER_REFERER,
            title=config.OPENROUTER_TITLE,
            normalizer=AnswerNormalizer(thresholds=thresholds),
        )
        return cls(pool=pool, client=client, api_key=config.OPENROUTER_API_KEY, policy=policy)

    @property
    def pool(self) -> ModelPool:
        return self._pool

    @property
    def policy(self) -> FallbackPolicy:
        return self._policy

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------- helpers ----------

    def _build_messages(self, messages: Iterable[Message], context) -> tuple[Message, ...]:
        system_message = prompt_builder.build(context)
        conversation = tuple(messages)
        if not conversation:
            raise EmptyConversationError()
        if any(message.role == Role.SYSTEM for message in conversation):
            raise CallerSystemMessageError()
        return (system_message, *conversation)

    def _fatal(
        self,
        request_id: str,
        reason: FatalReason,
        attempts: tuple[AttemptRecord, ...] = (),
        error: Exception | None = None,
    ) -> FatalError:
        logger.error(
            f"Answer request failed fatally: {reason.value}",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "reason": reason.value,
                    "error": str(error) if error else None,
                    "attempts": [record.to_dict() for record in attempts],
                }
            },
        )
        return FatalError(reason=reason, attempts=attempts)

    async def _attempt(self, candidate: str, messages: tuple[Message, ...], timeout_s: float):
        try:
            return await asyncio.wait_for(
                self._client.complete(candidate, messages, api_key=self._api_key),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            return Failure.of(FailureKind.TIMEOUT, detail=f"no response within {timeout_s:.1f}s")
        except Exception as e:
            logger.exception(
                f"Completion client raised for {candidate}",
                extra={"extra_fields": {"model": candidate, "error_type": type(e).__name__}},
            )
            return Failure.of(FailureKind.MODEL_UNAVAILABLE, detail=f"{type(e).__name__}: {e}"[:300])

    # ---------- public API ----------

    async def answer(self, messages: Iterable[Message], context: Context | str) -> FinalOutcome:
        """
        Answer a conversation under a context tag.

        Args:
            messages: Caller conversation in chronological order (user/assistant only)
            context: "syariah" or "history"

        Returns:
            Answer, Exhausted (every attempt, in order) or FatalError
        """
        request_id = str(uuid.uuid4())

        try:
            full_messages = self._build_messages(messages, context)
        except InvalidContextError as e:
            return self._fatal(request_id, FatalReason.INVALID_CONTEXT, error=e)
        except (OrchestratorError, ValueError) as e:
            return self._fatal(request_id, FatalReason.INVALID_REQUEST, error=e)

        if not self._api_key:
            return self._fatal(request_id, FatalReason.MISSING_CREDENTIAL)

        candidates = self._pool.candidates()
        if not candidates:
            return self._fatal(request_id, FatalReason.EMPTY_POOL)

        policy = self._policy
        loop = asyncio.get_running_loop()
        deadline = loop.time() + policy.chain_budget_s(len(candidates))

        attempts: list[AttemptRecord] = []
        index = 0
        candidate_attempts = 0

        while True:
            candidate = candidates[index]
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(
                    "Answer chain deadline reached",
                    extra={
                        "extra_fields": {
                            "request_id": request_id,
                            "next_candidate": candidate,
                            "attempt_count": len(attempts),
                        }
                    },
                )
                return self._exhausted(request_id, attempts)

            start_time = time.monotonic()
            result = await self._attempt(
                candidate, full_messages, min(policy.attempt_timeout_s, remaining)
            )
            latency_ms = int((time.monotonic() - start_time) * 1000)
            attempts.append(AttemptRecord(candidate=candidate, result=result, latency_ms=latency_ms))
            candidate_attempts += 1

            decision = self._fallback_manager.decide(
                result=result,
                candidate_index=index,
                candidate_attempts=candidate_attempts,
                pool_size=len(candidates),
                policy=policy,
            )

            logger.info(
                f"Attempt {len(attempts)} on {candidate}: {decision.reason}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": candidate,
                        "pool_index": index,
                        "latency_ms": latency_ms,
                        "outcome": decision.reason,
                        "next_action": decision.action.value,
                    }
                },
            )

            if decision.action == NextAction.SUCCEED:
                logger.info(
                    "Answer produced",
                    extra={
                        "extra_fields": {
                            "request_id": request_id,
                            "model": candidate,
                            "attempts": [record.label for record in attempts],
                        }
                    },
                )
                return Answer(text=result.text, model=candidate, attempts=tuple(attempts))

            if decision.action == NextAction.STOP_FATAL:
                return self._fatal(request_id, decision.fatal_reason, tuple(attempts))

            if decision.action == NextAction.STOP_EXHAUSTED:
                return self._exhausted(request_id, attempts)

            if decision.action == NextAction.ADVANCE:
                index += 1
                candidate_attempts = 0

    def _exhausted(self, request_id: str, attempts: list[AttemptRecord]) -> Exhausted:
        logger.error(
            "All candidates failed",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "attempts": [record.to_dict() for record in attempts],
                }
            },
        )
        return Exhausted(attempts=tuple(attempts))

    async def answer_question(self, question: str, context: Context | str = Context.SYARIAH) -> FinalOutcome:
        """Single-question convenience wrapper around answer()."""
        return await self.answer([Message(role=Role.USER, content=question)], context)
