"""Per-page processing: layout tree, key-value selection, layout XML and fields.

Each page builds its own tree, KVP lists, rankings and style table, so pages
can run on a worker pool without sharing mutable state.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from tqdm import tqdm

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.converters.layout_builder import log_layout
from adp_layout.datamodels.config import AdpConfig
from adp_layout.datamodels.key_value import DocumentClass, KeyValuePair, PageDimensions
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.fields.field_store import FieldRecord, remove_unneeded_fields
from adp_layout.fields.materializer import add_fields
from adp_layout.layout_xml.serializer import build_layout_xml, layout_file_name
from adp_layout.selection.policy import select_key_value_pairs

_log = logging.getLogger(__name__)

PAGE_FIELD_TYPE = "Page"
LAYOUT_VARIABLE = "layout"


@dataclass
class PageResult:
    """Everything produced for one page."""

    page_id: str
    page_field: FieldRecord
    ocr_text: Optional[str] = None
    document_classes: List[DocumentClass] = field(default_factory=list)
    dimensions: PageDimensions = field(default_factory=PageDimensions)
    blocks: List[LayoutNode] = field(default_factory=list)
    tables: List[LayoutNode] = field(default_factory=list)
    key_value_pairs: List[KeyValuePair] = field(default_factory=list)
    table_key_value_pairs: List[KeyValuePair] = field(default_factory=list)
    layout_xml: str = ""
    succeeded: bool = True

    @classmethod
    def failed(cls, page_id: str) -> "PageResult":
        return cls(
            page_id=page_id,
            page_field=new_page_field(page_id),
            succeeded=False,
        )


def new_page_field(page_id: str) -> FieldRecord:
    return FieldRecord(name=page_id, type=PAGE_FIELD_TYPE)


def process_page(
    results: AnalyzerResults,
    page_index: int,
    page_id: str,
    config: AdpConfig,
    page_field: Optional[FieldRecord] = None,
) -> PageResult:
    """Run one page of an analyzer result through the whole pipeline.

    Fields are written into ``page_field`` (a fresh page record by default),
    which also gets the ``layout`` variable naming the layout document, and
    the confidence filter from ``config`` is applied last.
    """
    if page_field is None:
        page_field = new_page_field(page_id)

    dimensions = results.page_dimensions()
    blocks = results.blocks(page_index)
    tables = results.tables(page_index)
    log_layout(blocks, tables, page_index)
    rankings = results.rankings()
    document_classes = results.document_classes()

    key_value_pairs = select_key_value_pairs(
        results.key_value_pairs(page_index), rankings, config.fields_action
    )
    table_key_value_pairs = results.table_key_value_pairs(page_index)

    layout_xml = build_layout_xml(blocks, tables, page_id, dimensions)

    add_fields(
        page_field,
        document_classes,
        key_value_pairs,
        table_key_value_pairs,
        config.field_suffix,
    )
    page_field.set_variable(LAYOUT_VARIABLE, layout_file_name(page_id))
    deleted = remove_unneeded_fields(page_field, config.confidence_action)

    _log.info(
        f"Page {page_id}: {len(blocks)} blocks, {len(tables)} tables, "
        f"{len(key_value_pairs)} KVPs, {len(table_key_value_pairs)} table KVPs, "
        f"{len(page_field.children)} fields ({deleted} removed)"
    )
    return PageResult(
        page_id=page_id,
        page_field=page_field,
        ocr_text=results.ocr_text(),
        document_classes=document_classes,
        dimensions=dimensions,
        blocks=blocks,
        tables=tables,
        key_value_pairs=key_value_pairs,
        table_key_value_pairs=table_key_value_pairs,
        layout_xml=layout_xml,
    )


def _process_page_safely(
    results: AnalyzerResults, page_index: int, page_id: str, config: AdpConfig
) -> PageResult:
    try:
        return process_page(results, page_index, page_id, config)
    except Exception as e:
        _log.error(f"Page {page_id} (index {page_index}) failed: {e}")
        return PageResult.failed(page_id)


def process_pages(
    results: AnalyzerResults,
    page_ids: List[str],
    config: AdpConfig,
    show_progress: bool = False,
) -> List[PageResult]:
    """Process page ``i`` of ``results`` as ``page_ids[i]``, in order.

    Pages run on a thread pool of ``config.max_threads`` workers unless
    multi-threading is switched off. A page that fails is logged and returned
    as an empty, unsucceeded result; the other pages still complete.
    """
    jobs = list(enumerate(page_ids))

    def run(job) -> PageResult:
        page_index, page_id = job
        return _process_page_safely(results, page_index, page_id, config)

    page_results: List[PageResult] = []
    if not config.use_multi_threading or config.max_threads <= 1:
        for job in tqdm(jobs, desc="Processing pages", disable=not show_progress):
            page_results.append(run(job))
    else:
        _log.debug(f"Processing {len(jobs)} pages on {config.max_threads} threads")
        with ThreadPoolExecutor(max_workers=config.max_threads) as pool:
            for result in tqdm(
                pool.map(run, jobs),
                total=len(jobs),
                desc="Processing pages",
                disable=not show_progress,
            ):
                page_results.append(result)

    failed = sum(1 for result in page_results if not result.succeeded)
    if failed:
        _log.warning(f"{failed} of {len(page_results)} pages failed")
    return page_results
