"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from models.outcomes import FinalOutcome
from orchestrator.core import to_payload


class AskResponseDTO(BaseModel):
    success: bool
    content: str | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: FinalOutcome) -> "AskResponseDTO":
        return cls(**to_payload(outcome))


class SearchResponseDTO(BaseModel):
    answer: str
    sources: list[dict[str, Any]] = Field(default_factory=list)


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str
    model_pool_size: int = 0
    credential_configured: bool = False
