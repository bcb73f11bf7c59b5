"""Tests for page preview rendering."""

import pytest

from fillable.model.field import Area, FieldSchema
from fillable.pdf.renderer import PdfRenderError, render_page_png
from fillable.pdf.writer import synthesize_fillable_pdf

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_renders_page_with_widgets(two_page_pdf):
    field = FieldSchema(uuid="f-1", type="checkbox", areas=(Area(page=1, x=0.1, y=0.1, w=0.05, h=0.05),))
    output = synthesize_fillable_pdf(two_page_pdf, [field])

    assert render_page_png(output, 1).startswith(PNG_SIGNATURE)


def test_page_out_of_range(two_page_pdf):
    with pytest.raises(PdfRenderError):
        render_page_png(two_page_pdf, 2)


def test_unreadable_document():
    with pytest.raises(PdfRenderError):
        render_page_png(b"not a pdf", 0)
