"""
Analyzer result post-processing

- Rebuilds the page layout tree (blocks, lines, words, tables) from analyzer JSON
- Aggregates OCR digit confidences up the tree
- Extracts key-value pairs, including table line items and cells
- Selects key-value pairs by key class ranking
- Serializes the page layout as a layout XML document
- Materializes key-value pairs as named, hierarchical fields

Usage:
    from adp_layout import AdpConfig, AnalyzerResults, process_page

    results = AnalyzerResults.from_file(json_path)
    page = process_page(results, 0, "page_0001", AdpConfig())

    # The layout document and the page's fields
    page.layout_xml, page.page_field
"""

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.converters.docling_export import layout_to_docling
from adp_layout.datamodels.config import AdpConfig
from adp_layout.datamodels.geometry import PageLocation
from adp_layout.datamodels.key_value import (
    DocumentClass,
    KeyValuePair,
    PageDimensions,
    RankEntry,
    Ranking,
)
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.datamodels.types import (
    ConfidenceAction,
    FieldsAction,
    KeyClassTier,
    LayoutNodeKind,
)
from adp_layout.errors import AdpLayoutError, MalformedAnalyzerResult
from adp_layout.fields.field_store import (
    FieldRecord,
    FieldStore,
    remove_unneeded_fields,
)
from adp_layout.fields.materializer import add_fields
from adp_layout.layout_xml.serializer import build_layout_xml
from adp_layout.layout_xml.spatial_sort import sort_blocks_and_tables
from adp_layout.pipeline import PageResult, process_page, process_pages
from adp_layout.selection.policy import select_key_value_pairs
from adp_layout.utils.confidence import char_confidence

__all__ = [
    # Results
    "AnalyzerResults",
    "PageResult",
    "process_page",
    "process_pages",
    # Models
    "PageLocation",
    "LayoutNode",
    "LayoutNodeKind",
    "KeyValuePair",
    "KeyClassTier",
    "Ranking",
    "RankEntry",
    "DocumentClass",
    "PageDimensions",
    # Configuration
    "AdpConfig",
    "FieldsAction",
    "ConfidenceAction",
    # Errors
    "AdpLayoutError",
    "MalformedAnalyzerResult",
    # Processing steps
    "char_confidence",
    "select_key_value_pairs",
    "sort_blocks_and_tables",
    "build_layout_xml",
    "add_fields",
    "remove_unneeded_fields",
    "layout_to_docling",
    # Fields
    "FieldStore",
    "FieldRecord",
]
