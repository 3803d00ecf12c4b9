"""Pydantic request models for FastAPI endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class ConversationMessage(BaseModel):
    role: str = Field(..., pattern="^(user|assistant|system)$")
    content: str = Field(..., min_length=1)


class AskRequest(BaseModel):
    messages: list[ConversationMessage]
    context: Literal["syariah", "history"] = "syariah"


class SearchRequest(BaseModel):
    query: str | None = None
