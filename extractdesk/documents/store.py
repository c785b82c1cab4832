from extractdesk.documents.document import Document
from extractdesk.documents.exceptions import DocumentNotFoundError


class DocumentStore:
    """In-memory registry of documents, keyed by id."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    def add(self, document: Document) -> Document:
        self._documents[document.id] = document
        return document

    def get(self, document_id: str) -> Document:
        """Raises DocumentNotFoundError for unknown ids."""
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    def list_for_project(self, project_id: str) -> list[Document]:
        return [doc for doc in self._documents.values() if doc.project_id == project_id]

    def __len__(self) -> int:
        return len(self._documents)
