from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class FailureKind(str, Enum):
    RATE_LIMITED = "RateLimited"
    MODEL_UNAVAILABLE = "ModelUnavailable"
    MALFORMED_RESPONSE = "MalformedResponse"
    AUTH_ERROR = "AuthError"
    NETWORK_ERROR = "NetworkError"
    TIMEOUT = "Timeout"


# Only credential problems recur on every candidate.
NON_RETRYABLE_KINDS = frozenset({FailureKind.AUTH_ERROR})


@dataclass(frozen=True)
class Success:
    text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    retryable: bool
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def of(cls, kind: FailureKind, detail: str = "") -> "Failure":
        return cls(kind=kind, retryable=kind not in NON_RETRYABLE_KINDS, detail=detail)


AttemptResult = Union[Success, Failure]


@dataclass(frozen=True)
class AttemptRecord:
    candidate: str
    result: AttemptResult
    latency_ms: int = 0

    @property
    def label(self) -> str:
        if isinstance(self.result, Success):
            return f"{self.candidate}:Success"
        return f"{self.candidate}:{self.result.kind.value}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "candidate": self.candidate,
            "latency_ms": self.latency_ms,
        }
        if isinstance(self.result, Success):
            data["outcome"] = "Success"
        else:
            data["outcome"] = self.result.kind.value
            data["retryable"] = self.result.retryable
            data["detail"] = self.result.detail
        return data


class FatalReason(str, Enum):
    INVALID_CONTEXT = "invalid_context"
    INVALID_REQUEST = "invalid_request"
    MISSING_CREDENTIAL = "missing_credential"
    EMPTY_POOL = "empty_pool"
    AUTH_ERROR = "auth_error"

    @property
    def is_configuration(self) -> bool:
        return self in {
            FatalReason.MISSING_CREDENTIAL,
            FatalReason.EMPTY_POOL,
            FatalReason.AUTH_ERROR,
        }


@dataclass(frozen=True)
class Answer:
    text: str
    model: str
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Exhausted:
    attempts: tuple[AttemptRecord, ...]


@dataclass(frozen=True)
class FatalError:
    reason: FatalReason
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)


FinalOutcome = Union[Answer, Exhausted, FatalError]
