"""
Outcome-tagged results returned by store operations and event handlers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RETRYABLE = "retryable"


@dataclass(frozen=True)
class Result:
    """Outcome of applying one operation, with an optional human-readable detail"""

    outcome: Outcome
    detail: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, detail: str = "", **data) -> "Result":
        return cls(Outcome.OK, detail, data)

    @classmethod
    def not_found(cls, detail: str = "") -> "Result":
        return cls(Outcome.NOT_FOUND, detail)

    @classmethod
    def conflict(cls, detail: str = "") -> "Result":
        return cls(Outcome.CONFLICT, detail)

    @classmethod
    def retryable(cls, detail: str = "") -> "Result":
        return cls(Outcome.RETRYABLE, detail)

    @property
    def is_ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def should_retry(self) -> bool:
        return self.outcome is Outcome.RETRYABLE
