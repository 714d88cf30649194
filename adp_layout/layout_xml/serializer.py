"""Serialize a page layout tree into the layout XML document.

The output is consumed by annotation tooling that expects this exact text:
element and attribute order, indentation and ``\\r\\n`` line endings are all
part of the format. The document is therefore written as text rather than
through an XML library.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from adp_layout.datamodels.geometry import PageLocation
from adp_layout.datamodels.key_value import PageDimensions
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.datamodels.types import LayoutNodeKind
from adp_layout.layout_xml.font_styles import FontStyleTable
from adp_layout.layout_xml.spatial_sort import sort_blocks_and_tables

_log = logging.getLogger(__name__)

NEWLINE = "\r\n"
INDENT = "  "
LAYOUT_ENCODING = "utf-16"
STYLE_DESCRIPTOR = (
    "color: 000000; font-name: arial; font-family: ft_sansserif; font-size: {size}pt; "
)


def escape_attribute(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def character_location(location: PageLocation, length: int, index: int) -> PageLocation:
    """Box of the ``index``-th of ``length`` characters spread evenly over a word."""
    average = (location.r - location.l) // length
    left = location.l + index * average
    return PageLocation(l=left, t=location.t, r=left + average, b=location.b)


def character_score(confidence: int) -> int:
    return confidence // 10


def word_score(word: LayoutNode) -> str:
    """One digit per character; characters can reach 10 but a word digit stops at 9."""
    score = min(max(character_score(word.confidence) - 1, 0), 9)
    return str(score) * len(word.text)


@dataclass
class TableCounters:
    """Row and column numbering for the table being written."""

    row: int = 0
    column: int = 0


class LayoutXmlWriter:
    """Accumulates the layout document for one page."""

    def __init__(self, styles: FontStyleTable):
        self.styles = styles
        self.table = TableCounters()
        self._parts: List[str] = []

    def _line(self, pad: str, text: str) -> None:
        self._parts.append(pad + text + NEWLINE)

    def write_nodes(self, nodes: List[LayoutNode], pad: str) -> None:
        child_pad = pad + INDENT
        for index, node in enumerate(nodes):
            kind = node.kind
            if kind in (LayoutNodeKind.BLOCK, LayoutNodeKind.WORD_GROUP_BLOCK):
                self._write_block(node, child_pad)
            elif kind in (
                LayoutNodeKind.LINE,
                LayoutNodeKind.WORD_GROUP,
                LayoutNodeKind.WORD_GROUP_LINE,
            ):
                self._write_styled(node, child_pad, "L")
            elif kind == LayoutNodeKind.PARAGRAPH:
                self._write_styled(node, child_pad, "Para")
            elif kind == LayoutNodeKind.ROW:
                self._write_row(node, child_pad)
            elif kind in (LayoutNodeKind.TABLE, LayoutNodeKind.WG_TABLE):
                self._write_table(node, child_pad)
            elif kind == LayoutNodeKind.CELL:
                self._write_cell(node, child_pad)
            elif kind == LayoutNodeKind.WORD:
                self._write_word(node, child_pad, more_words=index + 1 < len(nodes))

    def _write_block(self, block: LayoutNode, pad: str) -> None:
        self._line(pad, f'<Block pos="{block.location.position}">')
        self.write_nodes(block.children, pad + INDENT)
        self._line(pad, "</Block>")

    def _write_styled(self, node: LayoutNode, pad: str, tag: str) -> None:
        style = self.styles.style_id(self.styles.line_font_size(node))
        self._line(pad, f'<{tag} pos="{node.location.position}" s="{style}">')
        self.write_nodes(node.children, pad + INDENT)
        self._line(pad, f"</{tag}>")

    def _write_word(self, word: LayoutNode, pad: str, more_words: bool) -> None:
        text = word.text
        style = self.styles.style_id(word.font_size)
        self._line(
            pad,
            f'<W pos="{word.location.position}" v="{escape_attribute(text)}" '
            f's="{style}" cn="{word_score(word)}">',
        )
        score = character_score(word.confidence)
        for index, char in enumerate(text):
            box = character_location(word.location, len(text), index)
            self._line(
                pad + INDENT,
                f'<C pos="{box.position}" v="{escape_attribute(char)}" '
                f's="{style}" cn="{score}" />',
            )
        self._line(pad, "</W>")
        if more_words:
            self._line(pad, "<S />")

    def _write_table(self, table: LayoutNode, pad: str) -> None:
        rows = table.children
        columns = len(rows[0].children) if rows else 0
        self._line(
            pad,
            f'<Table columns="{columns}" pos="{table.location.position}" '
            f'rows="{len(rows)}">',
        )
        self.table = TableCounters()
        self.write_nodes(rows, pad + INDENT)
        self._line(pad, "</Table>")

    def _write_row(self, row: LayoutNode, pad: str) -> None:
        self.table.column = 0
        self._line(pad, f'<Row pos="{row.location.position}">')
        self.write_nodes(row.children, pad + INDENT)
        self._line(pad, "</Row>")
        self.table.row += 1

    def _write_cell(self, cell: LayoutNode, pad: str) -> None:
        self._line(
            pad,
            f'<Cell col="{self.table.column}" pos="{cell.location.position}" '
            f'row="{self.table.row}" columnSpan="1">',
        )
        self.write_nodes(cell.children, pad + INDENT)
        self._line(pad, "</Cell>")
        self.table.column += 1

    def render(
        self, nodes: List[LayoutNode], page_id: str, dimensions: PageDimensions
    ) -> str:
        width, height = dimensions.page_width, dimensions.page_height
        self._parts = ['<?xml version="1.0" encoding="utf-16"?>' + NEWLINE]
        self._parts.append(
            '<Page xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
            'xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
            f'pos="0,0,{width},{height}" lang="English" '
            f'id="{escape_attribute(page_id)}" '
            f'printArea="0,0,{width},{height}" '
            f'xdpi="{dimensions.dpi_x}" ydpi="{dimensions.dpi_y}" >' + NEWLINE
        )
        self.write_nodes(nodes, "")
        for size, style_id in self.styles.items():
            descriptor = STYLE_DESCRIPTOR.format(size=size)
            self._line(INDENT, f'<Style id="{style_id}" v="{descriptor}" />')
        self._parts.append("</Page>" + NEWLINE)
        return "".join(self._parts)


def build_layout_xml(
    blocks: List[LayoutNode],
    tables: List[LayoutNode],
    page_id: str,
    dimensions: PageDimensions,
) -> str:
    """Sort the page's blocks and tables and render them as one layout document."""
    ordered = sort_blocks_and_tables(blocks, tables)
    styles = FontStyleTable.from_nodes(ordered)
    xml = LayoutXmlWriter(styles).render(ordered, page_id, dimensions)
    _log.debug(f"Layout document for page {page_id}: {len(xml)} characters")
    return xml


def layout_file_name(page_id: str) -> str:
    return f"{page_id}_layout.xml"


def write_layout_xml(xml: str, output_dir: Path, page_id: str) -> Path:
    """Write the document next to the page, encoded to match its declaration."""
    path = output_dir / layout_file_name(page_id)
    with open(path, "w", encoding=LAYOUT_ENCODING, newline="") as fw:
        fw.write(xml)
    return path
