from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Context(str, Enum):
    SYARIAH = "syariah"
    HISTORY = "history"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def __post_init__(self):
        # accept plain strings from callers; unknown roles raise ValueError
        object.__setattr__(self, "role", Role(self.role))

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content}
