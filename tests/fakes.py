"""Offline stand-ins for completion backends."""

import asyncio
from typing import Any, Sequence

from api.base_client import BaseCompletionClient
from models.messages import Message
from models.outcomes import AttemptResult, Failure, FailureKind
from orchestrator.answer_normalizer import AnswerNormalizer


class FakeCompletionClient(BaseCompletionClient):
    """
    Scripted completion client for offline tests.
    script maps candidate -> AttemptResult, raw provider envelope (dict, run
    through AnswerNormalizer) or an exception instance to raise.
    Every call is recorded in order.
    """

    provider_name = "fake"

    def __init__(self, script: dict[str, Any], delay_s: float = 0.0):
        self.script = script
        self.delay_s = delay_s
        self.calls: list[str] = []
        self.sent_messages: list[tuple[Message, ...]] = []
        self.normalizer = AnswerNormalizer()

    async def complete(
        self,
        candidate: str,
        messages: Sequence[Message],
        api_key: str | None = None,
    ) -> AttemptResult:
        self.calls.append(candidate)
        self.sent_messages.append(tuple(messages))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)

        scripted = self.script.get(
            candidate, Failure.of(FailureKind.MODEL_UNAVAILABLE, detail="unscripted")
        )
        if isinstance(scripted, BaseException):
            raise scripted
        if isinstance(scripted, dict):
            return self.normalizer.normalize(scripted)
        return scripted


class BlockingCompletionClient(BaseCompletionClient):
    """Client whose request never finishes until cancelled."""

    def __init__(self):
        self.calls: list[str] = []
        self.started = asyncio.Event()
        self.cancelled = False

    async def complete(self, candidate, messages, api_key=None):
        self.calls.append(candidate)
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


def envelope(text: str) -> dict[str, Any]:
    return {
        "id": "gen-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
    }

