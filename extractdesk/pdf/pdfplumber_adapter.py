import io

import pdfplumber

from extractdesk.pdf.base import BasePdfExtractor
from extractdesk.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads page text with pdfplumber."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [(page.extract_text() or "").strip() for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not read pages: {exc}") from exc
