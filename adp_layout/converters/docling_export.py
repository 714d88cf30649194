import logging
from typing import List

from docling_core.types.doc.base import Size
from docling_core.types.doc.document import (
    DoclingDocument,
    PageItem,
    ProvenanceItem,
    TableCell,
    TableData,
)
from docling_core.types.doc.labels import DocItemLabel

from adp_layout.datamodels.key_value import PageDimensions
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.datamodels.types import LayoutNodeKind

_log = logging.getLogger(__name__)

PAGE_NO = 1


def _table_data(table: LayoutNode) -> TableData:
    rows = table.children_of_kind(LayoutNodeKind.ROW)
    table_data = TableData(table_cells=[], num_rows=len(rows), num_cols=0, grid=[])
    for row_index, row in enumerate(rows):
        cells = [cell for cell in row.children if cell.kind == LayoutNodeKind.CELL]
        table_data.num_cols = max(table_data.num_cols, len(cells))
        for col_index, cell in enumerate(cells):
            table_data.table_cells.append(
                TableCell(
                    bbox=cell.location.to_bounding_box(),
                    row_span=1,
                    col_span=1,
                    start_row_offset_idx=row_index,
                    end_row_offset_idx=row_index + 1,
                    start_col_offset_idx=col_index,
                    end_col_offset_idx=col_index + 1,
                    text=cell.all_lines().strip(),
                    column_header=False,
                    row_header=False,
                    row_section=False,
                )
            )
    return table_data


def layout_to_docling(
    blocks: List[LayoutNode],
    tables: List[LayoutNode],
    dimensions: PageDimensions,
    name: str,
) -> DoclingDocument:
    """Converts a page layout tree to a single-page DoclingDocument."""
    document = DoclingDocument(name=name)
    document.pages[PAGE_NO] = PageItem(
        size=Size(
            width=float(dimensions.page_width), height=float(dimensions.page_height)
        ),
        page_no=PAGE_NO,
    )

    for block in blocks:
        for line in block.children_of_kind(LayoutNodeKind.LINE):
            text = line.all_lines().strip()
            prov = ProvenanceItem(
                page_no=PAGE_NO,
                bbox=line.location.to_bounding_box(),
                charspan=(0, len(text)),
            )
            document.add_text(label=DocItemLabel.TEXT, text=text, orig=text, prov=prov)

    for table in tables:
        prov = ProvenanceItem(
            page_no=PAGE_NO, bbox=table.location.to_bounding_box(), charspan=(0, 0)
        )
        document.add_table(label=DocItemLabel.TABLE, prov=prov, data=_table_data(table))

    _log.debug(
        f"Converted {len(blocks)} blocks and {len(tables)} tables of {name} "
        f"to a DoclingDocument"
    )
    return document
