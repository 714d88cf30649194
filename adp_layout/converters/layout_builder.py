"""Build layout trees from the analyzer's block and table lists.

Blocks become BLOCK -> LINE -> WORD trees and tables become
TABLE -> ROW -> CELL -> LINE -> WORD trees. Confidence comes from the words'
per-character digit strings; table nodes only carry font sizes.
"""

import logging
from typing import List

from adp_layout.datamodels.adp_json import AdpBlock, AdpCell, AdpLine, AdpTable, AdpWord
from adp_layout.datamodels.geometry import PageLocation
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.datamodels.types import LayoutNodeKind
from adp_layout.utils.confidence import char_confidence
from adp_layout.utils.values import parse_font_size

_log = logging.getLogger(__name__)


def build_word(word: AdpWord) -> LayoutNode:
    """Create a WORD node, the only kind whose metrics come from the analyzer."""
    value = word.value or ""
    return LayoutNode(
        kind=LayoutNodeKind.WORD,
        location=PageLocation.from_xywh(word.x, word.y, word.width, word.height),
        confidence=char_confidence(word.ocr_confidence),
        font_size=parse_font_size(word.font_size),
        text_lines=[value],
        original_text_lines=[value],
    )


def _new_line(line: AdpLine) -> LayoutNode:
    return LayoutNode(
        kind=LayoutNodeKind.LINE,
        location=PageLocation.from_xywh(line.x, line.y, line.width, line.height),
    )


def build_block(block: AdpBlock) -> LayoutNode:
    block_node = LayoutNode(
        kind=LayoutNodeKind.BLOCK,
        location=PageLocation.from_xywh(block.x, block.y, block.width, block.height),
    )
    block_lines: List[str] = []
    block_quality: List[str] = []

    for line in block.lines:
        line_node = _new_line(line)
        line_text: List[str] = []
        line_quality: List[str] = []
        for word in line.words:
            word_node = build_word(word)
            line_text.append(word_node.text + " ")
            line_quality.append(word.ocr_confidence or "")
            line_node.add_line(
                word_node.text,
                word_node.location,
                word_node.confidence,
                word.font_size,
            )
            line_node.add_child(word_node)

        block_quality.extend(line_quality)
        line_node.confidence = char_confidence("".join(line_quality))
        block_lines.append("".join(line_text))
        block_node.add_child(line_node)

    block_node.confidence = char_confidence("".join(block_quality))
    block_node.text_lines = block_lines
    block_node.original_text_lines = list(block_lines)
    return block_node


def _build_cell(cell: AdpCell) -> LayoutNode:
    cell_node = LayoutNode(
        kind=LayoutNodeKind.CELL,
        location=PageLocation.from_xywh(cell.x, cell.y, cell.width, cell.height),
    )
    cell_text: List[str] = []

    for line in cell.lines:
        line_node = _new_line(line)
        cell_font_size = None
        for word in line.words:
            word_node = build_word(word)
            cell_text.append(word_node.text + " ")
            line_node.add_line(
                word_node.text,
                word_node.location,
                word_node.confidence,
                word.font_size,
            )
            line_node.add_child(word_node)
            line_node.font_size = word_node.font_size
            cell_font_size = word.font_size

        cell_node.add_child(line_node)
        # Quality is scored over the cell text accumulated so far.
        cell_node.add_line(
            line_node.all_lines(),
            line_node.location,
            char_confidence("".join(cell_text)),
            cell_font_size,
        )
        cell_node.font_size = line_node.font_size

    return cell_node


def build_table(table: AdpTable) -> LayoutNode:
    table_node = LayoutNode(
        kind=LayoutNodeKind.TABLE,
        location=PageLocation.from_xywh(table.x, table.y, table.width, table.height),
    )
    for row in table.rows:
        row_node = LayoutNode(
            kind=LayoutNodeKind.ROW,
            location=PageLocation.from_xywh(row.x, row.y, row.width, row.height),
        )
        for cell in row.cells:
            cell_node = _build_cell(cell)
            row_node.add_child(cell_node)
            row_node.add_line(cell_node.all_lines(), cell_node.location)

        table_node.add_child(row_node)
        table_node.add_line(row_node.all_lines(), row_node.location)

    return table_node


def log_layout(blocks: List[LayoutNode], tables: List[LayoutNode], page: int) -> None:
    """Trace the reconstructed trees at debug level."""
    if not _log.isEnabledFor(logging.DEBUG):
        return
    for i, block in enumerate(blocks):
        _log.debug(
            f"Page {page} block {i} conf {block.confidence} "
            f"({block.location}): {block.all_lines()}"
        )
        for j, line in enumerate(block.children):
            _log.debug(
                f"  line {j} conf {line.confidence} ({line.location}): {line.all_lines()}"
            )
    for i, table in enumerate(tables):
        _log.debug(f"Page {page} table {i} ({table.location}): {table.all_lines()}")
        for j, row in enumerate(table.children):
            _log.debug(f"  row {j} ({row.location}): {row.all_lines()}")
            for k, cell in enumerate(row.children):
                _log.debug(f"    cell {k} ({cell.location}): {cell.all_lines()}")
