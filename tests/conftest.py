import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def build_pdf(page_count: int, title: str = "") -> bytes:
    """Generate a PDF whose pages read "Page 1", "Page 2", ..."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    if title:
        c.setTitle(title)
        c.setAuthor("docsplit tests")
    for number in range(1, page_count + 1):
        c.drawString(72, 720, f"Page {number}")
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def make_pdf() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def ten_page_pdf_bytes() -> bytes:
    return build_pdf(10, title="Invoices batch")


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF."""
    return build_pdf(1)
