import json
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from extractdesk.documents.models import DocType


class SkillCategory(str, Enum):
    DATE = "Date"
    AMOUNT = "Amount"
    ENTITY = "Entity"
    TEXT = "Text"
    BOOLEAN = "Boolean"
    OTHER = "Other"

    @property
    def label_cn(self) -> str:
        return _CATEGORY_CN[self]

    @classmethod
    def parse(cls, raw: object) -> "SkillCategory":
        """Lenient lookup used for collaborator output; unknown values become OTHER."""
        for category in cls:
            if isinstance(raw, str) and raw.strip().lower() == category.value.lower():
                return category
        return cls.OTHER


_CATEGORY_CN: dict[SkillCategory, str] = {
    SkillCategory.DATE: "日期",
    SkillCategory.AMOUNT: "金额",
    SkillCategory.ENTITY: "主体/公司",
    SkillCategory.TEXT: "文本",
    SkillCategory.BOOLEAN: "是非判断",
    SkillCategory.OTHER: "其他",
}


def new_skill_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class ExtractionSkill:
    """Field-scoped extraction hint with an optional few-shot pair."""

    name: str
    description: str
    category: SkillCategory = SkillCategory.TEXT
    example: str = ""
    output_example: str = ""
    id: str = field(default_factory=new_skill_id)

    @property
    def has_example(self) -> bool:
        return bool(self.example or self.output_example)


@dataclass(frozen=True)
class ExtractionRule:
    """A versioned set of extraction instructions.

    Rules are immutable values: the library swaps a whole rule on update,
    so readers never see a partially written skill list. ``version`` only
    moves forward through rule evolution.
    """

    id: str
    doc_type: DocType
    name: str
    system_instruction: str
    schema: str
    skills: tuple[ExtractionSkill, ...] = ()
    version: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "skills", tuple(self.skills))
        if self.version < 1:
            raise ValueError(f"Rule '{self.id}': version must be >= 1, got {self.version}")

    def schema_keys(self) -> list[str]:
        """Output keys declared by ``schema``.

        Accepts either a flat ``{"key": "type"}`` object or a JSON Schema with
        ``properties``. An unparseable schema declares no keys.
        """
        try:
            parsed = json.loads(self.schema)
        except (TypeError, json.JSONDecodeError):
            return []
        if not isinstance(parsed, dict):
            return []
        properties = parsed.get("properties")
        if parsed.get("type") == "object" and isinstance(properties, dict):
            return list(properties)
        return list(parsed)


@dataclass(frozen=True)
class RuleDraft:
    """Rule content proposed by the rule synthesizer, not yet in the library."""

    system_instruction: str
    schema: str
    skills: tuple[ExtractionSkill, ...] = ()
