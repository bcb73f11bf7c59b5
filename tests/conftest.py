"""Shared fixtures: small source PDFs built with reportlab."""

from __future__ import annotations

from io import BytesIO

import pytest
from reportlab.pdfgen import canvas


def build_pdf(
    page_sizes: list[tuple[float, float]],
    with_field: str | None = None,
    field_font: str | None = None,
) -> bytes:
    buffer = BytesIO()
    report = canvas.Canvas(buffer, pagesize=page_sizes[0])
    for number, size in enumerate(page_sizes, start=1):
        report.setPageSize(size)
        report.drawString(72, size[1] - 72, f"Page {number}")
        if with_field and number == 1:
            report.acroForm.textfield(name=with_field, x=72, y=72, width=200, height=20, fontName=field_font)
        report.showPage()
    report.save()
    return buffer.getvalue()


@pytest.fixture
def two_page_pdf() -> bytes:
    return build_pdf([(600, 800), (600, 800)])


@pytest.fixture
def mixed_size_pdf() -> bytes:
    return build_pdf([(600, 800), (612, 792), (842, 595)])


@pytest.fixture
def acroform_pdf() -> bytes:
    return build_pdf([(600, 800)], with_field="existing")


@pytest.fixture
def courier_form_pdf() -> bytes:
    return build_pdf([(600, 800)], with_field="existing", field_font="Courier")
