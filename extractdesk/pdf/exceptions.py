class PdfExtractionError(Exception):
    """Raised when page text cannot be read from PDF bytes."""
