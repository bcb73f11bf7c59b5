"""PDF loading helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from io import BytesIO

from pypdf import PdfReader
import structlog

from fillable.model.document import PdfDocument

logger = structlog.get_logger(__name__)

_HEADER_WINDOW = 1024


class DocumentOpenError(RuntimeError):
    """Raised when source bytes cannot be opened as a PDF."""


def load_pdf(document_bytes: bytes) -> PdfDocument:
    if not document_bytes:
        raise DocumentOpenError("Source document is empty")
    if b"%PDF-" not in document_bytes[:_HEADER_WINDOW]:
        raise DocumentOpenError("Source document is not a PDF")

    stream = BytesIO(document_bytes)
    try:
        reader = PdfReader(stream)
        if reader.is_encrypted:
            raise DocumentOpenError("Encrypted PDF not supported")
        # Force the page tree to load so structural damage surfaces here.
        page_count = len(reader.pages)
    except DocumentOpenError:
        stream.close()
        raise
    except Exception as exc:
        stream.close()
        raise DocumentOpenError(f"Failed to open PDF: {exc}") from exc

    logger.debug("pdf.opened", pages=page_count, size=len(document_bytes))
    return PdfDocument(stream=stream, reader=reader)


@contextmanager
def open_pdf(document_bytes: bytes) -> Iterator[PdfDocument]:
    """Open ``document_bytes`` for the duration of the block, then release it."""
    document = load_pdf(document_bytes)
    try:
        yield document
    finally:
        document.close()
