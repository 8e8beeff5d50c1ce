import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


def _render_pages(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4)
    for lines in pages:
        y = 780
        for line in lines:
            pdf.drawString(72, y, line)
            y -= 18
        pdf.showPage()
    pdf.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Single-page lease with a text layer."""
    return _render_pages([["RESIDENTIAL LEASE AGREEMENT", "The tenant shall pay rent monthly."]])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Two-page contract; each page carries its own clause."""
    return _render_pages([["Clause 1: Term of the agreement"], ["Clause 2: Termination"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Valid PDF whose only page has no text layer, like an unscanned image upload."""
    return _render_pages([[]])
