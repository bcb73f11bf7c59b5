"""PDF rendering helpers using PyMuPDF."""

from __future__ import annotations

import fitz

from fillable.config import DEFAULT_PREVIEW_ZOOM


class PdfRenderError(RuntimeError):
    """Raised when a page cannot be rendered."""


def render_page_png(document_bytes: bytes, page_index: int, zoom: float = DEFAULT_PREVIEW_ZOOM) -> bytes:
    try:
        document = fitz.open(stream=document_bytes, filetype="pdf")
    except Exception as exc:
        raise PdfRenderError("Failed to open PDF for rendering") from exc

    try:
        if page_index < 0 or page_index >= document.page_count:
            raise PdfRenderError(f"Page index out of range: {page_index}")

        try:
            page = document.load_page(page_index)
            matrix = fitz.Matrix(zoom, zoom)
            pix = page.get_pixmap(matrix=matrix, alpha=False, annots=True)
            return pix.tobytes("png")
        except Exception as exc:  # pragma: no cover - defensive for PyMuPDF errors
            raise PdfRenderError(f"Failed to render page {page_index + 1}") from exc
    finally:
        document.close()
