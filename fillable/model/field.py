"""Form field schema definitions and field-type resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fillable.config import FIELD_FLAG_PUSH_BUTTON, FIELD_FLAG_RADIO


class FieldSchemaError(ValueError):
    """Raised when a field schema payload cannot be deserialized."""


class FieldType(str, Enum):
    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"


class WidgetKind(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    UNSUPPORTED = "unsupported"


_KIND_BY_TYPE: dict[str, WidgetKind] = {
    FieldType.TEXT.value: WidgetKind.TEXT,
    FieldType.DATE.value: WidgetKind.TEXT,
    FieldType.NUMBER.value: WidgetKind.TEXT,
    FieldType.CHECKBOX.value: WidgetKind.CHECKBOX,
    FieldType.RADIO.value: WidgetKind.RADIO,
}


def resolve_widget_kind(field_type: str) -> WidgetKind:
    """Map a schema field type to the widget kind it produces.

    Types without a widget representation (signature, image, select, ...)
    resolve to ``WidgetKind.UNSUPPORTED``.
    """
    return _KIND_BY_TYPE.get(field_type, WidgetKind.UNSUPPORTED)


def widget_kind_for_pdf_field(field_type: str | None, flags: int) -> WidgetKind:
    """Classify an AcroForm field by its ``/FT`` and ``/Ff`` entries."""
    if field_type == "/Tx":
        return WidgetKind.TEXT
    if field_type != "/Btn":
        return WidgetKind.UNSUPPORTED
    if flags & FIELD_FLAG_RADIO:
        return WidgetKind.RADIO
    # Push buttons carry no state to fill.
    if flags & FIELD_FLAG_PUSH_BUTTON:
        return WidgetKind.UNSUPPORTED
    return WidgetKind.CHECKBOX


@dataclass(slots=True, frozen=True)
class Area:
    page: int
    x: float
    y: float
    w: float
    h: float
    option_uuid: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Area:
        try:
            page = data["page"]
            if isinstance(page, bool) or not isinstance(page, int):
                raise TypeError(f"page must be an integer, got {page!r}")
            return cls(
                page=page,
                x=_as_float(data["x"]),
                y=_as_float(data["y"]),
                w=_as_float(data["w"]),
                h=_as_float(data["h"]),
                option_uuid=_optional_str(data.get("option_uuid")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise FieldSchemaError(f"Invalid area: {data!r}") from exc


@dataclass(slots=True, frozen=True)
class FieldSchema:
    uuid: str
    type: str
    name: str | None = None
    areas: tuple[Area, ...] = field(default_factory=tuple)
    required: bool = False
    readonly: bool = False
    default_value: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.uuid

    @property
    def widget_kind(self) -> WidgetKind:
        return resolve_widget_kind(self.type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldSchema:
        if not isinstance(data, Mapping):
            raise FieldSchemaError(f"Field must be an object, got {type(data).__name__}")
        uuid = data.get("uuid")
        field_type = data.get("type")
        if not uuid or not isinstance(uuid, str):
            raise FieldSchemaError(f"Field is missing a uuid: {data!r}")
        if not field_type or not isinstance(field_type, str):
            raise FieldSchemaError(f"Field {uuid} is missing a type")

        raw_areas = data.get("areas") or []
        if not isinstance(raw_areas, list):
            raise FieldSchemaError(f"Field {uuid} areas must be a list")

        return cls(
            uuid=uuid,
            type=field_type,
            name=_optional_str(data.get("name")),
            areas=tuple(Area.from_dict(area) for area in raw_areas),
            required=_flag(data, "required", uuid),
            readonly=_flag(data, "readonly", uuid),
            default_value=_optional_str(data.get("default_value")),
        )


def parse_fields(payload: Any) -> list[FieldSchema]:
    """Deserialize a field list, or a mapping holding one under ``fields``."""
    if isinstance(payload, Mapping):
        if "fields" not in payload:
            raise FieldSchemaError("Expected a list of fields or an object with a fields key")
        payload = payload["fields"] or []
    if not isinstance(payload, list):
        raise FieldSchemaError("Expected a list of fields")
    return [FieldSchema.from_dict(item) for item in payload]


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, list):
        # Multi-value defaults (e.g. multiple select) collapse to their first entry.
        return str(value[0]) if value else None
    return str(value)


def _flag(data: Mapping[str, Any], key: str, uuid: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise FieldSchemaError(f"Field {uuid} {key} must be true or false, got {value!r}")
    return value
