from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for PDF page-text adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Read the text of every page, in page order.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            One stripped string per page; blank pages yield "".

        Raises:
            PdfExtractionError: if the bytes cannot be parsed.
        """
