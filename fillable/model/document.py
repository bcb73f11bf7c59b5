"""Document model for an opened source PDF."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from pypdf import PdfReader

from fillable.pdf.geometry import PageBox


@dataclass(slots=True)
class PdfDocument:
    stream: BytesIO
    reader: PdfReader

    @property
    def page_count(self) -> int:
        return len(self.reader.pages)

    def page_box(self, page_index: int) -> PageBox | None:
        """Return the page's box, or None when the index names no page."""
        if page_index < 0 or page_index >= self.page_count:
            return None
        return PageBox.from_page(self.reader.pages[page_index])

    @property
    def is_closed(self) -> bool:
        return self.stream.closed

    def close(self) -> None:
        if not self.stream.closed:
            self.stream.close()
