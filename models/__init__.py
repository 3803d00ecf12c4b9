"""
Models package for conversation messages and answer outcomes.
"""

from .messages import Context, Message, Role
from .outcomes import (
    Answer,
    AttemptRecord,
    AttemptResult,
    Exhausted,
    Failure,
    FailureKind,
    FatalError,
    FatalReason,
    FinalOutcome,
    Success,
)

__all__ = [
    "Answer",
    "AttemptRecord",
    "AttemptResult",
    "Context",
    "Exhausted",
    "Failure",
    "FailureKind",
    "FatalError",
    "FatalReason",
    "FinalOutcome",
    "Message",
    "Role",
    "Success",
]
