from extractdesk.documents.document import Document
from extractdesk.logging.logger import Log
from extractdesk.pdf.base import BasePdfExtractor


class DocumentIngestor:
    """Builds a Document (status UPLOADED, type UNKNOWN) from uploaded PDF bytes."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def from_pdf(
        self,
        name: str,
        pdf_bytes: bytes,
        *,
        project_id: str = "",
        uploader_id: str = "",
    ) -> Document:
        """Raises PdfExtractionError when the bytes are not a readable PDF."""
        pages = self._pdf_extractor.extract_pages(pdf_bytes)
        document = Document(
            name=name,
            content=tuple(pages),
            project_id=project_id,
            uploader_id=uploader_id,
        )
        Log.info(
            f"Ingested '{name}': {len(pages)} pages, "
            f"{sum(len(page) for page in pages)} chars",
            document_id=document.id,
        )
        return document
