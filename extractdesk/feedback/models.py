from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class BadCaseType(str, Enum):
    MISSED = "missed"
    INCORRECT = "incorrect"

    @property
    def label_cn(self) -> str:
        return "漏提" if self is BadCaseType.MISSED else "错提"


@dataclass(frozen=True)
class BadCase:
    """A span of source text flagged during review."""

    text: str
    type: BadCaseType
    note: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
