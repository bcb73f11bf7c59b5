"""Conversion from normalized schema areas to PDF user-space rectangles."""

from __future__ import annotations

from dataclasses import dataclass

from pypdf import PageObject

from fillable.model.field import Area


@dataclass(slots=True, frozen=True)
class PageBox:
    left: float
    bottom: float
    width: float
    height: float

    @classmethod
    def from_page(cls, page: PageObject) -> PageBox:
        box = page.mediabox
        return cls(
            left=float(box.left),
            bottom=float(box.bottom),
            width=float(box.width),
            height=float(box.height),
        )


@dataclass(slots=True, frozen=True)
class Rect:
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


def to_pdf_rect(area: Area, box: PageBox) -> Rect:
    """Map a top-left-origin normalized area onto the page's bottom-left space.

    Both the vertical offset and the area height scale by the page box height.
    Out-of-range fractions are not clamped.
    """
    x0 = box.left + area.x * box.width
    top = box.bottom + box.height - area.y * box.height
    width = area.w * box.width
    height = area.h * box.height
    return Rect(x0=x0, y0=top - height, x1=x0 + width, y1=top)
