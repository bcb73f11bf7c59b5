"""Read AcroForm widgets from a PDF into in-memory models."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from pypdf import PdfReader

from fillable.model.field import WidgetKind, widget_kind_for_pdf_field
from fillable.pdf.geometry import Rect


class PdfImportError(RuntimeError):
    """Raised when form widgets cannot be read."""


@dataclass(slots=True, frozen=True)
class PlacedWidget:
    page_index: int
    name: str
    kind: WidgetKind
    rect: Rect
    option: str | None = None


def import_pdf_widgets(document_bytes: bytes) -> list[PlacedWidget]:
    imported: list[PlacedWidget] = []

    try:
        reader = PdfReader(BytesIO(document_bytes))
        for page_index, page in enumerate(reader.pages):
            annots = page.get("/Annots") or []
            for annot_ref in annots:
                annot = annot_ref.get_object()
                if annot.get("/Subtype") != "/Widget":
                    continue

                parent = annot.get("/Parent")
                parent_obj = parent.get_object() if parent is not None else None

                field_type = annot.get("/FT") or (parent_obj.get("/FT") if parent_obj else None)
                rect = annot.get("/Rect")
                if field_type is None or rect is None:
                    continue

                name = str(annot.get("/T") or (parent_obj.get("/T") if parent_obj else "") or "")
                flags = annot.get("/Ff")
                if flags is None and parent_obj is not None:
                    flags = parent_obj.get("/Ff")

                kind = widget_kind_for_pdf_field(field_type, int(flags or 0))
                if kind is WidgetKind.UNSUPPORTED:
                    continue

                imported.append(
                    PlacedWidget(
                        page_index=page_index,
                        name=name,
                        kind=kind,
                        rect=Rect(*(float(value) for value in rect)),
                        option=_on_state(annot) if kind is WidgetKind.RADIO else None,
                    )
                )
    except Exception as exc:
        raise PdfImportError("Failed to read form widgets") from exc

    return imported


def _on_state(annot) -> str | None:
    appearance = annot.get("/AP")
    if appearance is None:
        return None
    normal = appearance.get_object().get("/N")
    if normal is None:
        return None
    for state in normal.get_object().keys():
        if state != "/Off":
            return str(state)[1:]
    return None
