import asyncio

import pytest
from fastapi import HTTPException

from models.messages import Context, Message, Role
from models.outcomes import Answer, Success
from orchestrator.core import AnswerOrchestrator
from orchestrator.fallback_manager import FallbackPolicy
from server.utils import HTTP_CLIENT_CLOSED_REQUEST, run_until_disconnected
from tests.fakes import BlockingCompletionClient

pytestmark = pytest.mark.unit

QUESTION = [Message(role=Role.USER, content="Apa hukum qunut subuh?")]


class DisconnectingRequest:
    """Request stand-in that reports a disconnect after a number of polls."""

    def __init__(self, connected_polls: int):
        self.connected_polls = connected_polls
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.polls > self.connected_polls


def _orchestrator(make_pool, client):
    return AnswerOrchestrator(
        pool=make_pool("A", "B", "C"),
        client=client,
        api_key="sk-or-test",
        policy=FallbackPolicy(attempt_timeout_s=30),
    )


def test_disconnect_cancels_in_flight_attempt(make_pool):
    client = BlockingCompletionClient()
    orchestrator = _orchestrator(make_pool, client)
    request = DisconnectingRequest(connected_polls=1)

    async def scenario():
        with pytest.raises(HTTPException) as exc_info:
            await run_until_disconnected(
                request, orchestrator.answer(QUESTION, Context.SYARIAH), poll_interval_s=0.01
            )
        return exc_info.value

    error = asyncio.run(scenario())

    assert error.status_code == HTTP_CLIENT_CLOSED_REQUEST == 499
    assert client.calls == ["A"]
    assert client.cancelled is True
    assert request.polls == 2


def test_result_returned_while_connected(make_pool, fake_client_factory):
    client = fake_client_factory({"A": Success(text="Boleh.")}, delay_s=0.03)
    orchestrator = _orchestrator(make_pool, client)
    request = DisconnectingRequest(connected_polls=1000)

    outcome = asyncio.run(
        run_until_disconnected(
            request, orchestrator.answer(QUESTION, Context.SYARIAH), poll_interval_s=0.01
        )
    )

    assert isinstance(outcome, Answer)
    assert outcome.text == "Boleh."
