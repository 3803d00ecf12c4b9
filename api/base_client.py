import asyncio
import time
from abc import ABC, abstractmethod
from typing import Sequence

import httpx
import openai

from models.messages import Message
from models.outcomes import AttemptResult, Failure, FailureKind
from orchestrator.answer_normalizer import classify_status


class BaseCompletionClient(ABC):
    """
    Abstract base class for chat-completion backends.

    A client performs exactly one outbound request per complete() call and never
    retries on its own; retry and fallback policy belong to the orchestrator.
    """

    provider_name: str = "unknown"

    @abstractmethod
    async def complete(
        self,
        candidate: str,
        messages: Sequence[Message],
        api_key: str | None = None,
    ) -> AttemptResult:
        """
        Ask one candidate model for a completion.

        Args:
            candidate: Model identifier from the pool
            messages: Full message list, system instruction first
            api_key: Credential override; defaults to the client's own

        Returns:
            Success with the normalized answer, or a classified Failure.
            Cancellation propagates as asyncio.CancelledError.
        """

    async def aclose(self) -> None:
        return None

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    def _normalize_error(self, exc: BaseException) -> Failure:
        """Classify an exception raised by the transport into a Failure."""
        detail = f"{type(exc).__name__}: {exc}"[:300]

        if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException, asyncio.TimeoutError)):
            return Failure.of(FailureKind.TIMEOUT, detail=detail)
        if isinstance(exc, openai.APIConnectionError):
            return Failure.of(FailureKind.NETWORK_ERROR, detail=detail)
        if isinstance(exc, openai.APIStatusError):
            return Failure.of(classify_status(exc.status_code, str(exc)), detail=detail)
        if isinstance(exc, (httpx.NetworkError, ConnectionError, OSError)):
            return Failure.of(FailureKind.NETWORK_ERROR, detail=detail)
        if isinstance(exc, (openai.APIResponseValidationError, ValueError, KeyError, TypeError)):
            return Failure.of(FailureKind.MALFORMED_RESPONSE, detail=detail)

        return Failure.of(FailureKind.MODEL_UNAVAILABLE, detail=detail)
