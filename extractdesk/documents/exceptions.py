class DocumentError(Exception):
    """Base exception for document lifecycle and field-map errors."""


class InvalidTransitionError(DocumentError):
    """Raised when an event is not allowed from the document's current status."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document id is not registered."""


class FieldNotFoundError(DocumentError):
    """Raised when a field key is not present in a document's field map."""
