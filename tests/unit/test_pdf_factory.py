from unittest.mock import MagicMock

import pytest

from extractdesk.pdf.factory import PdfExtractorFactory
from extractdesk.pdf.pdfplumber_adapter import PdfPlumberAdapter
from extractdesk.pdf.pymupdf_adapter import PyMuPdfAdapter


def _make_settings(pdf_engine: str) -> MagicMock:
    settings = MagicMock()
    settings.pdf_engine = pdf_engine
    return settings


class TestPdfExtractorFactory:
    def test_creates_pdfplumber_adapter(self) -> None:
        adapter = PdfExtractorFactory.create(_make_settings("pdfplumber"))
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_creates_pymupdf_adapter(self) -> None:
        adapter = PdfExtractorFactory.create(_make_settings("pymupdf"))
        assert isinstance(adapter, PyMuPdfAdapter)

    def test_is_case_insensitive(self) -> None:
        adapter = PdfExtractorFactory.create(_make_settings(" PdfPlumber "))
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_raises_for_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            PdfExtractorFactory.create(_make_settings("unknown"))
