"""Configuration constants and widget styling options."""

from __future__ import annotations

from dataclasses import dataclass

# Output
PDF_CONTENT_TYPE = "application/pdf"
FILLABLE_SUFFIX = "-fillable"

# Preview rendering
DEFAULT_PREVIEW_ZOOM = 1.25

# AcroForm field flags (PDF 32000-1, tables 221, 226, 228)
FIELD_FLAG_READ_ONLY = 1
FIELD_FLAG_REQUIRED = 1 << 1
FIELD_FLAG_NO_TOGGLE_TO_OFF = 1 << 14
FIELD_FLAG_RADIO = 1 << 15
FIELD_FLAG_PUSH_BUTTON = 1 << 16

# Widget annotation flag: print
ANNOTATION_FLAG_PRINT = 4

# Checkbox default values treated as "checked"
CHECKED_VALUES = frozenset({"true", "yes", "on", "1", "checked"})

# Minimum overlay drawing size for degenerate areas, in points
MIN_OVERLAY_SIZE = 1.0

LOG_FORMAT = "%(message)s"


@dataclass(slots=True, frozen=True)
class WidgetStyle:
    hide_borders: bool = True
    clear_background: bool = True
    need_appearances: bool = True
    font_size: float | None = None


DEFAULT_STYLE = WidgetStyle()
