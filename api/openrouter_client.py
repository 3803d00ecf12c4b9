import time
from typing import Sequence

import httpx
import openai

from models.messages import Message
from models.outcomes import AttemptResult, Failure, FailureKind, Success
from orchestrator.answer_normalizer import AnswerNormalizer
from utils.logger import get_logger

from .base_client import BaseCompletionClient

logger = get_logger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterClient(BaseCompletionClient):
    """
    OpenRouter chat-completion client.

    Uses the OpenAI SDK with a custom base URL since OpenRouter is OpenAI-compatible.
    SDK retries are disabled so each complete() call is exactly one request.
    """

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout_s: float = 8.0,
        referer: str | None = None,
        title: str | None = None,
        normalizer: AnswerNormalizer | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the OpenRouter client.

        Args:
            api_key: Default bearer credential (may be supplied per call instead)
            base_url: OpenRouter API root
            timeout_s: Per-request deadline in seconds
            referer: Value for the HTTP-Referer attribution header
            title: Value for the X-Title attribution header
            normalizer: Envelope normalizer; defaults to AnswerNormalizer()
            http_client: Transport override, mainly for tests
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.normalizer = normalizer or AnswerNormalizer()
        self._headers = {}
        if referer:
            self._headers["HTTP-Referer"] = referer
        if title:
            self._headers["X-Title"] = title
        self._http_client = http_client
        self._clients: dict[str, openai.AsyncOpenAI] = {}

    def _client_for(self, api_key: str) -> openai.AsyncOpenAI:
        if api_key not in self._clients:
            self._clients[api_key] = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=self.base_url,
                max_retries=0,
                timeout=self.timeout_s,
                default_headers=self._headers,
                http_client=self._http_client,
            )
        return self._clients[api_key]

    async def complete(
        self,
        candidate: str,
        messages: Sequence[Message],
        api_key: str | None = None,
    ) -> AttemptResult:
        key = api_key or self.api_key
        if not key:
            return Failure.of(FailureKind.AUTH_ERROR, detail="no credential configured")

        start_time = time.monotonic()
        try:
            raw_response = await self._client_for(key).chat.completions.with_raw_response.create(
                model=candidate,
                messages=[message.to_dict() for message in messages],
                timeout=self.timeout_s,
            )
            body = raw_response.http_response.json()
        except (openai.OpenAIError, OSError, ValueError) as e:
            result = self._normalize_error(e)
        else:
            result = self.normalizer.normalize(body)

        latency_ms = self._measure_latency(start_time)
        if isinstance(result, Success):
            logger.info(
                "OpenRouter completion successful",
                extra={
                    "extra_fields": {
                        "model": candidate,
                        "latency_ms": latency_ms,
                        "answer_chars": len(result.text),
                    }
                },
            )
        else:
            logger.warning(
                f"OpenRouter completion failed: {result.kind.value}",
                extra={
                    "extra_fields": {
                        "model": candidate,
                        "latency_ms": latency_ms,
                        "error_kind": result.kind.value,
                        "retryable": result.retryable,
                        "detail": result.detail,
                    }
                },
            )
        return result

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
