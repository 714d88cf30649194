from pathlib import Path

from docling_core.types.doc.document import DoclingDocument
from docling_core.types.doc.labels import DocItemLabel

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.converters.docling_export import PAGE_NO, layout_to_docling

SAMPLE_JSON = Path(__file__).parent / "data" / "sample_adp_result.json"


def _sample_document() -> DoclingDocument:
    results = AnalyzerResults.from_file(SAMPLE_JSON)
    return layout_to_docling(
        results.blocks(0),
        results.tables(0),
        results.page_dimensions(),
        name="sample",
    )


def test_page_and_text_items():
    document = _sample_document()

    assert document.name == "sample"
    assert list(document.pages) == [PAGE_NO]
    assert document.pages[PAGE_NO].size.width == 2550.0
    assert document.pages[PAGE_NO].size.height == 3300.0

    assert [item.text for item in document.texts] == ["INVOICE", "Number 12345"]
    assert all(item.label == DocItemLabel.TEXT for item in document.texts)
    prov = document.texts[1].prov[0]
    assert prov.page_no == PAGE_NO
    assert (prov.bbox.l, prov.bbox.t, prov.bbox.r, prov.bbox.b) == (
        100.0,
        200.0,
        700.0,
        250.0,
    )
    assert prov.charspan == (0, len("Number 12345"))


def test_table_items():
    document = _sample_document()

    assert len(document.tables) == 1
    data = document.tables[0].data
    assert data.num_rows == 2
    assert data.num_cols == 2
    cells = {
        (cell.start_row_offset_idx, cell.start_col_offset_idx): cell.text
        for cell in data.table_cells
    }
    assert cells == {(0, 0): "Item", (0, 1): "Qty", (1, 0): "Widget", (1, 1): "5"}


def test_empty_page():
    results = AnalyzerResults.from_file(SAMPLE_JSON)
    document = layout_to_docling([], [], results.page_dimensions(), name="empty")

    assert document.texts == []
    assert document.tables == []
    assert PAGE_NO in document.pages


def test_saved_document_loads_back(tmp_path):
    document = _sample_document()

    path = tmp_path / "sample_0.json"
    document.save_as_json(path)
    loaded = DoclingDocument.load_from_json(path)
    assert [item.text for item in loaded.texts] == ["INVOICE", "Number 12345"]
    assert loaded.tables[0].data.num_rows == 2
