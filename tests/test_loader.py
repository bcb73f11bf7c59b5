"""Tests for scoped PDF loading."""

import pytest

from fillable.pdf.loader import DocumentOpenError, load_pdf, open_pdf


class TestLoadPdf:
    def test_exposes_page_geometry(self, mixed_size_pdf):
        document = load_pdf(mixed_size_pdf)
        try:
            assert document.page_count == 3
            box = document.page_box(1)
            assert (box.width, box.height) == (612, 792)
            assert document.page_box(3) is None
            assert document.page_box(-1) is None
        finally:
            document.close()

    @pytest.mark.parametrize("payload", [b"", b"not a pdf at all", b"<html><body>%PDF</body></html>"])
    def test_rejects_non_pdf_bytes(self, payload):
        with pytest.raises(DocumentOpenError):
            load_pdf(payload)


class TestOpenPdf:
    def test_releases_handle_on_exit(self, two_page_pdf):
        with open_pdf(two_page_pdf) as document:
            assert not document.is_closed
        assert document.is_closed

    def test_releases_handle_on_error(self, two_page_pdf):
        with pytest.raises(KeyError):
            with open_pdf(two_page_pdf) as document:
                raise KeyError("boom")
        assert document.is_closed
