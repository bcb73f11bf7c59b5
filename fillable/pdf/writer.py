"""Fillable PDF synthesis using reportlab overlay widgets + pypdf."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from io import BytesIO
from typing import Any

from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
    StreamObject,
    TextStringObject,
)
from reportlab.lib import colors
from reportlab.pdfgen import canvas
import structlog

from fillable.config import (
    ANNOTATION_FLAG_PRINT,
    CHECKED_VALUES,
    DEFAULT_STYLE,
    MIN_OVERLAY_SIZE,
    WidgetStyle,
)
from fillable.model.document import PdfDocument
from fillable.model.field import FieldSchema, WidgetKind
from fillable.pdf.geometry import Rect, to_pdf_rect
from fillable.pdf.loader import DocumentOpenError, open_pdf
from fillable.state.registry import FieldKindConflict, FieldRegistry, RegisteredField

logger = structlog.get_logger(__name__)

# Keys that belong to the widget annotation rather than its parent field.
_WIDGET_KEYS = ("/Type", "/Subtype", "/MK", "/AP", "/AS", "/DA", "/Q", "/BS", "/H")


class DocumentWriteError(RuntimeError):
    """Raised when the fillable document cannot be produced."""


@dataclass(slots=True, frozen=True)
class WidgetPlacement:
    field: FieldSchema
    kind: WidgetKind
    page_index: int
    rect: Rect
    option: str | None = None

    @property
    def field_name(self) -> str:
        return self.field.display_name


def synthesize_fillable_pdf(
    document_bytes: bytes,
    fields: Sequence[FieldSchema],
    style: WidgetStyle = DEFAULT_STYLE,
) -> bytes:
    """Return a copy of ``document_bytes`` with widgets for ``fields``.

    Only an unreadable source document or a failed write raises. Unsupported
    field types, fields without areas and areas on missing pages are skipped.
    """
    with open_pdf(document_bytes) as document:
        placements = plan_placements(document, fields)

        try:
            writer = PdfWriter(clone_from=document.reader)
        except Exception as exc:
            raise DocumentOpenError(f"Failed to read PDF structure: {exc}") from exc

        if placements:
            try:
                _place_widgets(document, writer, placements, style)
            except Exception as exc:
                raise DocumentWriteError(f"Failed to place form widgets: {exc}") from exc

        logger.info(
            "fillable.synthesized",
            fields=len(fields),
            widgets=len(placements),
            pages=document.page_count,
        )
        return _serialize(writer)


def plan_placements(
    document: PdfDocument,
    fields: Sequence[FieldSchema],
) -> list[WidgetPlacement]:
    placements: list[WidgetPlacement] = []

    for schema in fields:
        kind = schema.widget_kind
        if kind is WidgetKind.UNSUPPORTED:
            logger.debug("fillable.field_skipped", field=schema.uuid, type=schema.type, reason="unsupported_type")
            continue
        if not schema.areas:
            logger.debug("fillable.field_skipped", field=schema.uuid, type=schema.type, reason="no_areas")
            continue

        for position, area in enumerate(schema.areas, start=1):
            box = document.page_box(area.page)
            if box is None:
                logger.debug(
                    "fillable.area_skipped",
                    field=schema.uuid,
                    page=area.page,
                    page_count=document.page_count,
                )
                continue

            option = None
            if kind is WidgetKind.RADIO:
                option = area.option_uuid or f"Option{position}"

            placements.append(
                WidgetPlacement(
                    field=schema,
                    kind=kind,
                    page_index=area.page,
                    rect=to_pdf_rect(area, box),
                    option=option,
                )
            )

    return placements


def _place_widgets(
    document: PdfDocument,
    writer: PdfWriter,
    placements: list[WidgetPlacement],
    style: WidgetStyle,
) -> None:
    overlay_reader = PdfReader(_build_overlay_pdf(document, placements, style))
    overlay_widgets = _collect_overlay_widgets(overlay_reader)
    field_refs = _ensure_acroform(writer, overlay_reader, style)
    registry = FieldRegistry(writer)
    registry.seed(field_refs)

    for index, placement in enumerate(placements):
        try:
            parent, created = registry.get_or_create(
                placement.field_name,
                placement.kind,
                required=placement.field.required,
                readonly=placement.field.readonly,
            )
        except FieldKindConflict as exc:
            logger.warning(
                "fillable.area_skipped",
                field=placement.field.uuid,
                page=placement.page_index,
                reason=str(exc),
            )
            continue

        if created:
            _apply_default_value(parent, placement)
            field_refs.append(parent.reference)

        source_widget = overlay_widgets[_overlay_name(index)]
        _transfer_widget(source_widget, writer, placement, parent, style)

    logger.debug("fillable.fields_registered", count=len(registry.all_fields()))


def _overlay_name(index: int) -> str:
    return f"w{index}"


def _build_overlay_pdf(
    document: PdfDocument,
    placements: list[WidgetPlacement],
    style: WidgetStyle,
) -> BytesIO:
    grouped: dict[int, list[tuple[int, WidgetPlacement]]] = {}
    for index, placement in enumerate(placements):
        grouped.setdefault(placement.page_index, []).append((index, placement))

    buffer = BytesIO()
    first_box = document.page_box(0)
    report = canvas.Canvas(buffer, pagesize=(first_box.width, first_box.height))

    for page_index in range(document.page_count):
        box = document.page_box(page_index)
        report.setPageSize((box.width, box.height))

        for index, placement in grouped.get(page_index, []):
            _draw_widget(report, _overlay_name(index), placement, style)

        report.showPage()

    report.save()
    buffer.seek(0)
    return buffer


def _draw_widget(
    report: canvas.Canvas,
    name: str,
    placement: WidgetPlacement,
    style: WidgetStyle,
) -> None:
    rect = placement.rect
    width = max(abs(rect.width), MIN_OVERLAY_SIZE)
    height = max(abs(rect.height), MIN_OVERLAY_SIZE)
    size = min(width, height)

    if placement.kind is WidgetKind.TEXT:
        options: dict[str, Any] = {}
        if style.font_size is not None:
            options["fontSize"] = style.font_size
        report.acroForm.textfield(
            name=name,
            x=rect.x0,
            y=rect.y0,
            width=width,
            height=height,
            value=placement.field.default_value or "",
            forceBorder=False,
            borderWidth=0,
            fillColor=None,
            borderColor=None,
            textColor=colors.black,
            **options,
        )
    elif placement.kind is WidgetKind.CHECKBOX:
        report.acroForm.checkbox(
            name=name,
            x=rect.x0,
            y=rect.y0,
            size=size,
            checked=_is_checked(placement.field),
            buttonStyle="check",
            borderWidth=0,
            fillColor=None,
            borderColor=None,
        )
    else:
        # Drawn as a lone button; its on-state becomes the option id on transfer.
        report.acroForm.checkbox(
            name=name,
            x=rect.x0,
            y=rect.y0,
            size=size,
            checked=False,
            buttonStyle="circle",
            shape="circle",
            borderWidth=0,
            fillColor=None,
            borderColor=None,
        )


def _collect_overlay_widgets(overlay_reader: PdfReader) -> dict[str, DictionaryObject]:
    widgets: dict[str, DictionaryObject] = {}
    for page in overlay_reader.pages:
        for annot_ref in page.get("/Annots") or []:
            annot = annot_ref.get_object()
            if annot.get("/Subtype") != "/Widget":
                continue
            name = annot.get("/T")
            if name is None and annot.get("/Parent") is not None:
                name = annot["/Parent"].get_object().get("/T")
            if name is not None:
                widgets[str(name)] = annot
    return widgets


def _ensure_acroform(
    writer: PdfWriter,
    overlay_reader: PdfReader,
    style: WidgetStyle,
) -> ArrayObject:
    root = writer._root_object
    if "/AcroForm" in root:
        acroform = root["/AcroForm"].get_object()
    else:
        acroform = DictionaryObject()
        root[NameObject("/AcroForm")] = writer._add_object(acroform)

    if "/Fields" not in acroform:
        acroform[NameObject("/Fields")] = ArrayObject()

    overlay_acroform = overlay_reader.trailer["/Root"].get("/AcroForm")
    if overlay_acroform is not None:
        overlay_acroform = overlay_acroform.get_object()
        if "/DA" not in acroform and "/DA" in overlay_acroform:
            acroform[NameObject("/DA")] = overlay_acroform.raw_get("/DA").clone(writer)
        if "/DR" in overlay_acroform:
            _merge_fonts(writer, acroform, overlay_acroform["/DR"])

    if style.need_appearances:
        acroform[NameObject("/NeedAppearances")] = BooleanObject(True)

    return acroform["/Fields"].get_object()


def _merge_fonts(writer: PdfWriter, acroform: DictionaryObject, overlay_resources: DictionaryObject) -> None:
    if "/DR" not in acroform:
        acroform[NameObject("/DR")] = DictionaryObject()
    resources = acroform["/DR"]
    if "/Font" not in resources:
        resources[NameObject("/Font")] = DictionaryObject()
    fonts = resources["/Font"]

    overlay_fonts = overlay_resources.get("/Font")
    if overlay_fonts is None:
        return
    overlay_fonts = overlay_fonts.get_object()
    for font_name in overlay_fonts:
        if font_name not in fonts:
            fonts[NameObject(font_name)] = overlay_fonts.raw_get(font_name).clone(writer)


def _apply_default_value(parent: RegisteredField, placement: WidgetPlacement) -> None:
    default = placement.field.default_value
    if placement.kind is WidgetKind.TEXT and default:
        parent.obj[NameObject("/V")] = TextStringObject(default)
    elif placement.kind is WidgetKind.CHECKBOX and _is_checked(placement.field):
        parent.obj[NameObject("/V")] = NameObject("/Yes")


def _is_checked(schema: FieldSchema) -> bool:
    return (schema.default_value or "").strip().lower() in CHECKED_VALUES


def _transfer_widget(
    source: DictionaryObject,
    writer: PdfWriter,
    placement: WidgetPlacement,
    parent: RegisteredField,
    style: WidgetStyle,
) -> IndirectObject:
    widget = DictionaryObject()
    for key in _WIDGET_KEYS:
        if key in source:
            widget[NameObject(key)] = source.raw_get(key).clone(writer)

    target_page = writer.pages[placement.page_index]
    widget[NameObject("/Type")] = NameObject("/Annot")
    widget[NameObject("/Subtype")] = NameObject("/Widget")
    widget[NameObject("/Rect")] = ArrayObject(FloatObject(value) for value in placement.rect.as_tuple())
    widget[NameObject("/F")] = NumberObject(ANNOTATION_FLAG_PRINT)
    widget[NameObject("/P")] = target_page.indirect_reference
    widget[NameObject("/Parent")] = parent.reference
    if placement.kind is not WidgetKind.TEXT and "/AS" not in widget:
        widget[NameObject("/AS")] = NameObject("/Off")
    if placement.kind is WidgetKind.RADIO:
        _rename_on_state(widget, placement.option)

    if style.clear_background:
        _clear_widget_background(widget)
    if style.hide_borders:
        widget[NameObject("/Border")] = ArrayObject([NumberObject(0), NumberObject(0), NumberObject(0)])

    widget_ref = writer._add_object(widget)
    parent.kids.append(widget_ref)
    _append_annotation(target_page, widget_ref)
    return widget_ref


def _rename_on_state(widget: DictionaryObject, option: str) -> None:
    """Rebuild the widget's appearance dictionaries with ``option`` as the on-state."""
    appearance = widget.get("/AP")
    if appearance is None:
        return

    on_state = NameObject(f"/{option}")
    renamed = DictionaryObject()
    for mode, states in appearance.get_object().items():
        states = states.get_object()
        if isinstance(states, StreamObject) or not isinstance(states, DictionaryObject):
            # A lone stream carries no states to rename.
            renamed[NameObject(mode)] = appearance.get_object().raw_get(mode)
            continue
        mode_states = DictionaryObject()
        for state in states:
            key = NameObject(state) if state == "/Off" else on_state
            mode_states[key] = states.raw_get(state)
        renamed[NameObject(mode)] = mode_states
    widget[NameObject("/AP")] = renamed

    if widget.get("/AS") not in (None, "/Off"):
        widget[NameObject("/AS")] = on_state


def _append_annotation(page: DictionaryObject, widget_ref: IndirectObject) -> None:
    annots_obj = page.get("/Annots")
    if annots_obj is None:
        annots = ArrayObject()
    else:
        annots = annots_obj.get_object()
    annots.append(widget_ref)
    page[NameObject("/Annots")] = annots


def _clear_widget_background(widget_annot: DictionaryObject) -> None:
    mk = widget_annot.get("/MK")
    if mk is None:
        return
    mk_dict = mk.get_object()
    if "/BG" in mk_dict:
        del mk_dict["/BG"]


def _serialize(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    try:
        writer.write(buffer)
    except Exception as exc:
        raise DocumentWriteError(f"Failed to write output PDF: {exc}") from exc
    return buffer.getvalue()
