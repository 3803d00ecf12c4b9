from dataclasses import dataclass
from enum import Enum

from models.outcomes import FatalReason


class NextAction(str, Enum):
    SUCCEED = "succeed"
    RETRY_SAME_CANDIDATE = "retry_same_candidate"
    ADVANCE = "advance"
    STOP_EXHAUSTED = "stop_exhausted"
    STOP_FATAL = "stop_fatal"


@dataclass(frozen=True)
class FallbackDecision:
    action: NextAction
    reason: str
    fatal_reason: FatalReason | None = None
