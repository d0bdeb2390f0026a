from abc import ABC, abstractmethod


class BasePdfInspector(ABC):
    """Contract for PDF page-count adapters."""

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the PDF.

        The count is read from the file itself and never taken from the
        boundary detector.

        Raises:
            PdfInspectionError: if the bytes cannot be parsed or contain no pages.
        """
