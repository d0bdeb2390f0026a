from docsplit.pipeline.exceptions import ExtractionError


class PdfInspectionError(ExtractionError):
    """Raised when a PDF cannot be parsed to read its page count."""
