from dataclasses import dataclass
from typing import Any

from models.outcomes import AttemptResult, FatalReason, Success
from orchestrator.routing_types import FallbackDecision, NextAction


@dataclass(frozen=True)
class FallbackPolicy:
    attempt_timeout_s: float = 8.0
    chain_timeout_s: float | None = None
    chain_timeout_ceiling_s: float = 45.0
    max_attempts_per_candidate: int = 1

    def __post_init__(self):
        if self.attempt_timeout_s <= 0:
            raise ValueError("attempt_timeout_s must be positive")
        if self.chain_timeout_s is not None and self.chain_timeout_s <= 0:
            raise ValueError("chain_timeout_s must be positive")
        if self.chain_timeout_ceiling_s <= 0:
            raise ValueError("chain_timeout_ceiling_s must be positive")
        if self.max_attempts_per_candidate < 1:
            raise ValueError("max_attempts_per_candidate must be at least 1")

    @classmethod
    def from_defaults(cls, defaults: dict[str, Any]) -> "FallbackPolicy":
        kwargs: dict[str, Any] = {}
        for key in ("attempt_timeout_s", "chain_timeout_s", "chain_timeout_ceiling_s"):
            if defaults.get(key) is not None:
                kwargs[key] = float(defaults[key])
        if defaults.get("max_attempts_per_candidate") is not None:
            kwargs["max_attempts_per_candidate"] = int(defaults["max_attempts_per_candidate"])
        return cls(**kwargs)

    def chain_budget_s(self, pool_size: int) -> float:
        """End-to-end deadline: pool size x attempt timeout, capped by the ceiling."""
        if self.chain_timeout_s is not None:
            return min(self.chain_timeout_s, self.chain_timeout_ceiling_s)
        natural = pool_size * self.max_attempts_per_candidate * self.attempt_timeout_s
        return min(natural, self.chain_timeout_ceiling_s)


class FallbackManager:
    def decide(
        self,
        *,
        result: AttemptResult,
        candidate_index: int,
        candidate_attempts: int,
        pool_size: int,
        policy: FallbackPolicy,
    ) -> FallbackDecision:
        """
        Decide what to do after one attempt.

        candidate_attempts counts attempts made so far against the current
        candidate, including the one that produced result.
        """
        if isinstance(result, Success):
            return FallbackDecision(action=NextAction.SUCCEED, reason="ok")

        reason = result.kind.value
        if not result.retryable:
            return FallbackDecision(
                action=NextAction.STOP_FATAL, reason=reason, fatal_reason=FatalReason.AUTH_ERROR
            )

        if candidate_attempts < policy.max_attempts_per_candidate:
            return FallbackDecision(action=NextAction.RETRY_SAME_CANDIDATE, reason=reason)

        if candidate_index + 1 < pool_size:
            return FallbackDecision(action=NextAction.ADVANCE, reason=reason)

        return FallbackDecision(action=NextAction.STOP_EXHAUSTED, reason=reason)
