"""Shared utilities for FastAPI routes."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import HTTPException, Request, status

from models.outcomes import Answer, Exhausted, FinalOutcome

MAX_CONVERSATION_MESSAGES = 20
MAX_CONVERSATION_CHARS = 16000
DISCONNECT_POLL_INTERVAL_S = 0.5
HTTP_CLIENT_CLOSED_REQUEST = 499

T = TypeVar("T")


def validate_and_trim_conversation(messages):
    """Reject empty conversations and trim long ones to the most recent turns."""
    if not messages:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Conversation must contain at least one message",
        )

    if len(messages) > MAX_CONVERSATION_MESSAGES:
        messages = messages[-MAX_CONVERSATION_MESSAGES:]

    total_chars = sum(len(item.content) for item in messages)
    if total_chars > MAX_CONVERSATION_CHARS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Conversation exceeds {MAX_CONVERSATION_CHARS} characters",
        )

    return messages


def status_for_outcome(outcome: FinalOutcome) -> int:
    if isinstance(outcome, Answer):
        return status.HTTP_200_OK
    if isinstance(outcome, Exhausted):
        return status.HTTP_502_BAD_GATEWAY
    if outcome.reason.is_configuration:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval_s: float = DISCONNECT_POLL_INTERVAL_S,
) -> T:
    """
    Await a coroutine, cancelling it if the client goes away first.

    Raises:
        HTTPException(499): When the client disconnected before completion
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval_s)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                raise HTTPException(
                    status_code=HTTP_CLIENT_CLOSED_REQUEST, detail="Client closed request"
                )
    finally:
        if not task.done():
            task.cancel()
