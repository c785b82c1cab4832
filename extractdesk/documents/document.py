from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from extractdesk.documents.field_map import FieldMap
from extractdesk.documents.models import DocType
from extractdesk.documents.state_machine import DocumentEvent, ProcessingStatus, transition


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Document:
    """A document moving through classification, extraction and review.

    ``content`` holds one string per page and is only replaced by a re-upload.
    ``applied_rule_id`` refers to a rule owned by the rule library.
    """

    name: str
    content: tuple[str, ...]
    project_id: str = ""
    id: str = field(default_factory=_new_id)
    uploader_id: str = ""
    uploaded_at: datetime = field(default_factory=_utcnow)
    type: DocType = DocType.UNKNOWN
    status: ProcessingStatus = ProcessingStatus.UPLOADED
    extracted_data: FieldMap | None = None
    applied_rule_id: str | None = None

    def __post_init__(self) -> None:
        self.content = tuple(self.content)

    def full_text(self) -> str:
        return "\n".join(self.content)

    def first_page(self) -> str:
        return self.content[0] if self.content else ""

    def apply(self, event: DocumentEvent) -> ProcessingStatus:
        """Advance the lifecycle; raises InvalidTransitionError on an illegal edge."""
        self.status = transition(self.status, event)
        return self.status
