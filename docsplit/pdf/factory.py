from docsplit.config.settings import Settings
from docsplit.pdf.base import BasePdfInspector
from docsplit.pdf.pdfplumber_adapter import PdfPlumberInspector
from docsplit.pdf.pymupdf_adapter import PyMuPdfInspector


class PdfInspectorFactory:
    """Creates the correct PDF inspector based on settings."""

    ADAPTERS: dict[str, type[BasePdfInspector]] = {
        "pdfplumber": PdfPlumberInspector,
        "pymupdf": PyMuPdfInspector,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfInspector:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
