"""Template export: resolve the source document and build the fillable download."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from fillable.config import DEFAULT_STYLE, FILLABLE_SUFFIX, PDF_CONTENT_TYPE, WidgetStyle
from fillable.model.template import Template
from fillable.pdf.writer import synthesize_fillable_pdf

logger = structlog.get_logger(__name__)

DocumentLookup = Callable[[Template], bytes | None]


class SourceDocumentNotFoundError(RuntimeError):
    """Raised when a template has no source document to synthesize from."""


@dataclass(slots=True, frozen=True)
class FillableDownload:
    filename: str
    content: bytes
    content_type: str = PDF_CONTENT_TYPE


def fillable_filename(document_name: str) -> str:
    return f"{document_name}{FILLABLE_SUFFIX}.pdf"


def read_first_document(template: Template) -> bytes | None:
    """Default lookup: the bytes of the template's first document on disk."""
    if not template.documents:
        return None
    path = template.documents[0]
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def export_fillable(
    template: Template,
    lookup: DocumentLookup = read_first_document,
    style: WidgetStyle = DEFAULT_STYLE,
) -> FillableDownload:
    document_bytes = lookup(template)
    if document_bytes is None:
        raise SourceDocumentNotFoundError(
            f"Source document not found for template: {template.name}"
        )

    content = synthesize_fillable_pdf(document_bytes, template.fields, style=style)
    logger.info("fillable.exported", template=template.name, size=len(content))
    return FillableDownload(filename=fillable_filename(template.name), content=content)


def write_download(download: FillableDownload, directory: str | Path) -> Path:
    output = Path(directory) / download.filename
    output.write_bytes(download.content)
    return output
