import pymupdf

from extractdesk.pdf.base import BasePdfExtractor
from extractdesk.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads page text with PyMuPDF."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text().strip() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not read pages: {exc}") from exc
