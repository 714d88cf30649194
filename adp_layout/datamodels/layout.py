"""Layout tree reconstructed from an analyzer result.

A :class:`LayoutNode` owns its children exclusively. Only WORD nodes receive
confidence and font size straight from the analyzer; every other node gets
them from its words while the tree is assembled.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from adp_layout.datamodels.geometry import PageLocation
from adp_layout.datamodels.types import LayoutNodeKind


@dataclass
class LineEntry:
    """Auxiliary per-line record kept on a node alongside its text lines."""

    line: str
    location: PageLocation
    quality: Optional[int] = None
    font_size: Optional[str] = None


@dataclass
class LayoutNode:
    """Node in the page layout tree."""

    kind: LayoutNodeKind
    location: PageLocation = field(default_factory=PageLocation)
    confidence: int = 0
    font_size: int = 0
    text_lines: List[str] = field(default_factory=list)
    original_text_lines: List[str] = field(default_factory=list)
    children: List["LayoutNode"] = field(default_factory=list)
    line_entries: List[LineEntry] = field(default_factory=list)

    def add_child(self, child: "LayoutNode") -> None:
        self.children.append(child)

    def add_line(
        self,
        line: str,
        location: PageLocation,
        quality: Optional[int] = None,
        font_size: Optional[str] = None,
    ) -> None:
        """Record a line of text together with its box, quality and raw font size."""
        self.text_lines.append(line)
        self.line_entries.append(LineEntry(line, location, quality, font_size))

    def all_lines(self) -> str:
        """All text lines, each trimmed and followed by a single space."""
        return "".join(line.strip() + " " for line in self.text_lines)

    @property
    def text(self) -> str:
        """The first text line, which is the whole value for a word."""
        return self.text_lines[0] if self.text_lines else ""

    def children_of_kind(self, kind: LayoutNodeKind) -> List["LayoutNode"]:
        """Direct children of ``kind``.

        CELL is special: cells are collected from the rows of child tables,
        since cells never hang directly off a block.
        """
        if kind == LayoutNodeKind.CELL:
            cells: List[LayoutNode] = []
            for table in self.children:
                if table.kind != LayoutNodeKind.TABLE:
                    continue
                for row in table.children:
                    if row.kind != LayoutNodeKind.ROW:
                        continue
                    cells.extend(
                        cell
                        for cell in row.children
                        if cell.kind == LayoutNodeKind.CELL
                    )
            return cells
        return [child for child in self.children if child.kind == kind]
