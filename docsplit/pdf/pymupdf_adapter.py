import pymupdf

from docsplit.pdf.base import BasePdfInspector
from docsplit.pdf.exceptions import PdfInspectionError


class PyMuPdfInspector(BasePdfInspector):
    """Reads the page count of a PDF using PyMuPDF."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                count = doc.page_count
        except Exception as exc:
            raise PdfInspectionError(f"pymupdf could not open PDF: {exc}") from exc
        if count < 1:
            raise PdfInspectionError("PDF has no pages")
        return count
