"""Font size collection and style-id lookup for layout documents.

The analyzer sometimes reports font sizes multiplied by 100; such sizes are
divided back down when they are collected and when they are looked up.
"""

import logging
from typing import Dict, Iterable, List

from adp_layout.datamodels.layout import LayoutNode
from adp_layout.datamodels.types import LayoutNodeKind

_log = logging.getLogger(__name__)


def normalize_font_size(font_size: int) -> int:
    if font_size % 100 == 0:
        return font_size // 100
    return font_size


def collect_font_sizes(nodes: Iterable[LayoutNode]) -> List[int]:
    """Distinct normalized word font sizes, in first-seen order."""
    sizes: List[int] = []

    def remember(size: int) -> None:
        size = normalize_font_size(size)
        if size not in sizes:
            sizes.append(size)

    def visit(node_list: Iterable[LayoutNode]) -> None:
        for node in node_list:
            if node.kind == LayoutNodeKind.WORD:
                remember(node.font_size)
            elif node.kind == LayoutNodeKind.WORD_GROUP:
                # A word group reports its own size once per word.
                for _ in node.children_of_kind(LayoutNodeKind.WORD):
                    remember(node.font_size)
            else:
                visit(node.children)

    visit(nodes)
    return sizes


class FontStyleTable:
    """Maps each distinct font size to a style id, scoped to one document."""

    def __init__(self, font_sizes: Iterable[int]):
        self._ids: Dict[int, int] = {}
        for size in font_sizes:
            if size not in self._ids:
                self._ids[size] = len(self._ids)

    @classmethod
    def from_nodes(cls, nodes: Iterable[LayoutNode]) -> "FontStyleTable":
        return cls(collect_font_sizes(nodes))

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, font_size: int) -> bool:
        return font_size in self._ids

    def items(self):
        """``(font_size, style_id)`` pairs in id order."""
        return self._ids.items()

    def style_id(self, font_size: int) -> int:
        """Style id for a font size: exact, else the /100 size, else 0."""
        if font_size in self._ids:
            return self._ids[font_size]
        normalized = normalize_font_size(font_size)
        if normalized in self._ids:
            return self._ids[normalized]
        _log.debug(
            f"No style for font size {font_size}, known sizes: {list(self._ids)}"
        )
        return 0

    def closest_size(self, font_size: int) -> int:
        """The known size nearest to ``font_size``; later sizes win ties."""
        if font_size in self._ids or not self._ids:
            return font_size
        closest = None
        for size in self._ids:
            if closest is None or not abs(closest - font_size) < abs(size - font_size):
                closest = size
        return closest

    def line_font_size(self, node: LayoutNode) -> int:
        """Mean font size of a node's word children, snapped to a known size."""
        words = node.children_of_kind(LayoutNodeKind.WORD)
        if not words:
            return 0
        mean = sum(word.font_size for word in words) // len(words)
        return self.closest_size(mean)
