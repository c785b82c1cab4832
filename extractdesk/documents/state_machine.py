"""Document lifecycle state machine.

UPLOADED -> CLASSIFYING -> READY_TO_EXTRACT -> EXTRACTING -> REVIEW -> COMPLETED

``transition`` is a pure function of (status, event). Orchestration code
decides *when* an event fires; this module only decides whether it is legal.
Nothing ever leads back to UPLOADED.
"""

from enum import Enum

from extractdesk.documents.exceptions import InvalidTransitionError


class ProcessingStatus(str, Enum):
    UPLOADED = "Uploaded"
    CLASSIFYING = "Classifying"
    READY_TO_EXTRACT = "Ready"
    EXTRACTING = "Extracting"
    REVIEW = "Review Needed"
    COMPLETED = "Completed"

    @property
    def label_cn(self) -> str:
        return _STATUS_CN[self]


_STATUS_CN: dict[ProcessingStatus, str] = {
    ProcessingStatus.UPLOADED: "已上传",
    ProcessingStatus.CLASSIFYING: "分类中...",
    ProcessingStatus.READY_TO_EXTRACT: "待提取",
    ProcessingStatus.EXTRACTING: "提取中...",
    ProcessingStatus.REVIEW: "待人工确认",
    ProcessingStatus.COMPLETED: "已完成",
}


class DocumentEvent(str, Enum):
    START_CLASSIFICATION = "start_classification"
    CLASSIFICATION_RESOLVED = "classification_resolved"
    ASSIGN_TYPE = "assign_type"
    START_EXTRACTION = "start_extraction"
    EXTRACTION_SUCCEEDED = "extraction_succeeded"
    EXTRACTION_FAILED = "extraction_failed"
    REFINE = "refine"
    SIGN_OFF = "sign_off"


_TRANSITIONS: dict[tuple[ProcessingStatus, DocumentEvent], ProcessingStatus] = {
    (ProcessingStatus.UPLOADED, DocumentEvent.START_CLASSIFICATION): ProcessingStatus.CLASSIFYING,
    (ProcessingStatus.CLASSIFYING, DocumentEvent.CLASSIFICATION_RESOLVED): (
        ProcessingStatus.READY_TO_EXTRACT
    ),
    (ProcessingStatus.UPLOADED, DocumentEvent.ASSIGN_TYPE): ProcessingStatus.READY_TO_EXTRACT,
    (ProcessingStatus.CLASSIFYING, DocumentEvent.ASSIGN_TYPE): ProcessingStatus.READY_TO_EXTRACT,
    (ProcessingStatus.READY_TO_EXTRACT, DocumentEvent.ASSIGN_TYPE): (
        ProcessingStatus.READY_TO_EXTRACT
    ),
    (ProcessingStatus.READY_TO_EXTRACT, DocumentEvent.START_EXTRACTION): (
        ProcessingStatus.EXTRACTING
    ),
    # Re-running extraction from review replaces the field map wholesale.
    (ProcessingStatus.REVIEW, DocumentEvent.START_EXTRACTION): ProcessingStatus.EXTRACTING,
    (ProcessingStatus.EXTRACTING, DocumentEvent.EXTRACTION_SUCCEEDED): ProcessingStatus.REVIEW,
    (ProcessingStatus.EXTRACTING, DocumentEvent.EXTRACTION_FAILED): (
        ProcessingStatus.READY_TO_EXTRACT
    ),
    (ProcessingStatus.REVIEW, DocumentEvent.REFINE): ProcessingStatus.REVIEW,
    (ProcessingStatus.REVIEW, DocumentEvent.SIGN_OFF): ProcessingStatus.COMPLETED,
}


def transition(status: ProcessingStatus, event: DocumentEvent) -> ProcessingStatus:
    """Return the status reached by applying *event* in *status*.

    Raises:
        InvalidTransitionError: if the edge does not exist.
    """
    try:
        return _TRANSITIONS[(status, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot apply '{event.value}' to a document in status '{status.value}'"
        ) from None


def allowed_events(status: ProcessingStatus) -> list[DocumentEvent]:
    """List the events that are legal from *status*, in declaration order."""
    return [event for (source, event) in _TRANSITIONS if source is status]


def reachable_statuses() -> set[ProcessingStatus]:
    """Statuses reachable from UPLOADED by any sequence of legal events."""
    seen = {ProcessingStatus.UPLOADED}
    frontier = [ProcessingStatus.UPLOADED]
    while frontier:
        current = frontier.pop()
        for event in allowed_events(current):
            target = _TRANSITIONS[(current, event)]
            if target not in seen:
                seen.add(target)
                frontier.append(target)
    return seen
