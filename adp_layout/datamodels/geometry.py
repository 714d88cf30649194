"""Integer page rectangles used throughout the layout tree.

Boxes are kept in device pixels with a top-left origin. The analyzer reports
every region as ``(x, y, width, height)``; :meth:`PageLocation.from_xywh` is
the single place where that is turned into ``(left, top, right, bottom)``.
"""

from __future__ import annotations

from docling_core.types.doc.base import BoundingBox, CoordOrigin
from pydantic import BaseModel


class PageLocation(BaseModel):
    """Axis-aligned rectangle with integer ``l, t, r, b`` edges."""

    l: int = 0
    t: int = 0
    r: int = 0
    b: int = 0

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> PageLocation:
        return cls(l=x, t=y, r=x + width, b=y + height)

    @property
    def position(self) -> str:
        """The ``"l,t,r,b"`` string used in layout documents and field variables."""
        return f"{self.l},{self.t},{self.r},{self.b}"

    def union(self, other: PageLocation) -> PageLocation:
        """Return a new box covering both ``self`` and ``other``."""
        return PageLocation(
            l=min(self.l, other.l),
            t=min(self.t, other.t),
            r=max(self.r, other.r),
            b=max(self.b, other.b),
        )

    def to_bounding_box(self) -> BoundingBox:
        """Convert to a docling-core BoundingBox (TOPLEFT origin)."""
        return BoundingBox(
            l=float(self.l),
            t=float(self.t),
            r=float(self.r),
            b=float(self.b),
            coord_origin=CoordOrigin.TOPLEFT,
        )

    def __str__(self) -> str:
        return self.position
