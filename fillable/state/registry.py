"""Per-document registry of AcroForm parent fields."""

from __future__ import annotations

from dataclasses import dataclass, field

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from fillable.config import (
    FIELD_FLAG_NO_TOGGLE_TO_OFF,
    FIELD_FLAG_RADIO,
    FIELD_FLAG_READ_ONLY,
    FIELD_FLAG_REQUIRED,
)
from fillable.model.field import WidgetKind, widget_kind_for_pdf_field

_FIELD_TYPE_BY_KIND = {
    WidgetKind.TEXT: "/Tx",
    WidgetKind.CHECKBOX: "/Btn",
    WidgetKind.RADIO: "/Btn",
}

# Entries of a merged field/widget dictionary that move to the split-off widget.
_WIDGET_ONLY_KEYS = (
    "/Type",
    "/Subtype",
    "/Rect",
    "/P",
    "/F",
    "/MK",
    "/AP",
    "/AS",
    "/BS",
    "/Border",
    "/H",
    "/C",
    "/StructParent",
)


class FieldKindConflict(RuntimeError):
    """Raised when a name is reused for a widget of another kind."""


@dataclass(slots=True)
class RegisteredField:
    name: str
    kind: WidgetKind
    reference: IndirectObject

    @property
    def obj(self) -> DictionaryObject:
        return self.reference.get_object()

    @property
    def kids(self) -> ArrayObject:
        return self.obj[NameObject("/Kids")]


@dataclass(slots=True)
class FieldRegistry:
    writer: PdfWriter
    fields_by_name: dict[str, RegisteredField] = field(default_factory=dict)

    def get(self, name: str) -> RegisteredField | None:
        return self.fields_by_name.get(name)

    def seed(self, field_refs: ArrayObject) -> None:
        """Register the document's existing top-level fields by name."""
        for ref in field_refs:
            if not isinstance(ref, IndirectObject):
                continue
            existing = ref.get_object()
            name = existing.get("/T")
            if name is None or str(name) in self.fields_by_name:
                continue
            kind = widget_kind_for_pdf_field(existing.get("/FT"), int(existing.get("/Ff", 0)))
            self.fields_by_name[str(name)] = RegisteredField(name=str(name), kind=kind, reference=ref)

    def get_or_create(
        self,
        name: str,
        kind: WidgetKind,
        *,
        required: bool = False,
        readonly: bool = False,
    ) -> tuple[RegisteredField, bool]:
        """Return the parent field for ``name``, creating it on first use.

        The boolean is True when the field was created by this call.
        """
        existing = self.fields_by_name.get(name)
        if existing is not None:
            if existing.kind is not kind:
                raise FieldKindConflict(
                    f"Field {name!r} is a {existing.kind.value} field, not {kind.value}"
                )
            self._ensure_kids(existing)
            return existing, False

        parent = DictionaryObject(
            {
                NameObject("/FT"): NameObject(_FIELD_TYPE_BY_KIND[kind]),
                NameObject("/T"): TextStringObject(name),
                NameObject("/Ff"): NumberObject(_field_flags(kind, required, readonly)),
                NameObject("/Kids"): ArrayObject(),
            }
        )
        if kind is not WidgetKind.TEXT:
            parent[NameObject("/V")] = NameObject("/Off")

        registered = RegisteredField(name=name, kind=kind, reference=self.writer._add_object(parent))
        self.fields_by_name[name] = registered
        return registered, True

    def all_fields(self) -> list[RegisteredField]:
        return list(self.fields_by_name.values())

    def _ensure_kids(self, registered: RegisteredField) -> None:
        parent = registered.obj
        if "/Kids" in parent:
            return

        # A terminal field that is also its own widget: split off the widget.
        widget = DictionaryObject()
        for key in _WIDGET_ONLY_KEYS:
            if key in parent:
                widget[NameObject(key)] = parent.raw_get(key)
                del parent[key]
        widget[NameObject("/Parent")] = registered.reference
        widget_ref = self.writer._add_object(widget)
        parent[NameObject("/Kids")] = ArrayObject([widget_ref])

        for page in self.writer.pages:
            annots = page.get("/Annots")
            if annots is None:
                continue
            annots = annots.get_object()
            for position, annot_ref in enumerate(annots):
                if isinstance(annot_ref, IndirectObject) and annot_ref.idnum == registered.reference.idnum:
                    annots[position] = widget_ref


def _field_flags(kind: WidgetKind, required: bool, readonly: bool) -> int:
    flags = 0
    if readonly:
        flags |= FIELD_FLAG_READ_ONLY
    if required:
        flags |= FIELD_FLAG_REQUIRED
    if kind is WidgetKind.RADIO:
        flags |= FIELD_FLAG_RADIO | FIELD_FLAG_NO_TOGGLE_TO_OFF
    return flags
