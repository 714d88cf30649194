"""Accessors over one analyzer result document.

Every accessor is independent: a malformed section is logged and that
accessor returns an empty or default value, so the rest of the page can still
be processed. Only a document that is not JSON at all is rejected up front.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from adp_layout.converters.key_value_extractor import (
    extract_key_value_pair,
    extract_table_key_value_pair,
    log_key_value_pairs,
)
from adp_layout.converters.layout_builder import build_block, build_table
from adp_layout.datamodels.adp_json import (
    AdpBlock,
    AdpClassification,
    AdpKeyClassRanking,
    AdpKeyValueRecord,
    AdpPageInfo,
    AdpTable,
)
from adp_layout.datamodels.key_value import (
    DocumentClass,
    KeyValuePair,
    PageDimensions,
    RankEntry,
    Ranking,
)
from adp_layout.datamodels.layout import LayoutNode
from adp_layout.errors import MalformedAnalyzerResult

_log = logging.getLogger(__name__)

_RECOVERABLE = (
    KeyError,
    IndexError,
    TypeError,
    ValueError,
    AttributeError,
    OverflowError,
    ValidationError,
)


class AnalyzerResults:
    """Parsed analyzer output for one document."""

    def __init__(self, json_text: str):
        try:
            self._raw: Dict[str, Any] = json.loads(json_text)
        except json.JSONDecodeError as e:
            _log.error(f"Could not parse analyzer JSON results: {e}")
            raise MalformedAnalyzerResult(
                f"Could not parse analyzer JSON results: {e}"
            ) from e

    @classmethod
    def from_file(cls, path: Path) -> "AnalyzerResults":
        with open(path, "r", encoding="utf-8") as fr:
            return cls(fr.read())

    def _data(self) -> Dict[str, Any]:
        return self._raw["result"][0]["data"]

    def _page(self, page: int) -> Dict[str, Any]:
        page_list = self._data()["pageList"]
        if page < 0 or page >= len(page_list):
            raise IndexError(f"page {page} not in pageList of {len(page_list)} pages")
        return page_list[page]

    @property
    def page_count(self) -> int:
        try:
            return len(self._data()["pageList"])
        except _RECOVERABLE as e:
            _log.error(f"page_count: could not read pageList: {e}")
            return 0

    def ocr_text(self) -> Optional[str]:
        try:
            content = self._data()["DSOutput"][0]["Content"]
        except _RECOVERABLE as e:
            _log.debug(f"ocr_text: could not get OCR text: {e}")
            return None
        if content is None:
            return None
        return str(content)

    def document_classes(self) -> List[DocumentClass]:
        """The primary document class followed by the alternates."""
        classes: List[DocumentClass] = []
        try:
            classification = AdpClassification.model_validate(
                self._data()["Classification"]
            )
            classes.append(
                DocumentClass(
                    name=classification.document_class.actual,
                    class_match=classification.document_class.class_match or "",
                )
            )
            for alternate in classification.alternates:
                classes.append(
                    DocumentClass(
                        name=alternate.name, class_match=alternate.class_match
                    )
                )
        except _RECOVERABLE as e:
            _log.debug(f"document_classes: could not get document classes: {e}")
        return classes

    def page_dimensions(self) -> PageDimensions:
        """Page size and resolution, always read from the first page."""
        try:
            info = AdpPageInfo.model_validate(self._page(0)["PageInfo"])
        except _RECOVERABLE as e:
            _log.warning(f"page_dimensions: could not get page info: {e}")
            return PageDimensions()
        return PageDimensions(
            page_width=info.page_width,
            page_height=info.page_height,
            dpi_x=info.dpi_x,
            dpi_y=info.dpi_y,
            page_ocr_confidence=info.page_ocr_confidence,
        )

    def rankings(self) -> List[Ranking]:
        rankings: List[Ranking] = []
        try:
            for item in self._data()["KeyClassRankedList"]:
                parsed = AdpKeyClassRanking.model_validate(item)
                rankings.append(
                    Ranking(
                        key_class_id=parsed.key_class_id,
                        key_class_name=parsed.key_class_name,
                        key_class_type=parsed.key_class_type,
                        ranked_list=[
                            RankEntry(
                                page_no=entry.page_no,
                                kvp_id=entry.kvp_id,
                                reserved=entry.reserved,
                            )
                            for entry in parsed.ranked_list
                        ],
                    )
                )
        except _RECOVERABLE as e:
            _log.warning(f"rankings: could not get key class ranked list: {e}")
        for i, ranking in enumerate(rankings):
            _log.debug(
                f"Ranking {i}: key class name {ranking.key_class_name}, "
                f"ID {ranking.key_class_id}, type {ranking.key_class_type}, "
                f"KVPs {[entry.kvp_id for entry in ranking.ranked_list]}"
            )
        return rankings

    def blocks(self, page: int) -> List[LayoutNode]:
        result: List[LayoutNode] = []
        try:
            for raw_block in self._page(page)["BlockList"]:
                result.append(build_block(AdpBlock.model_validate(raw_block)))
        except _RECOVERABLE as e:
            _log.warning(f"blocks: could not get blocks for page {page}: {e}")
        return result

    def tables(self, page: int) -> List[LayoutNode]:
        result: List[LayoutNode] = []
        try:
            for raw_table in self._page(page).get("TableList") or []:
                result.append(build_table(AdpTable.model_validate(raw_table)))
        except _RECOVERABLE as e:
            _log.warning(f"tables: could not get tables for page {page}: {e}")
        return result

    def _kvp_records(self, page: int) -> List[Dict[str, Any]]:
        return self._page(page)["KVPTable"]

    def key_value_pairs(self, page: int) -> List[KeyValuePair]:
        """Every flat KVP on the page, before any selection policy is applied."""
        _log.debug(f"key_value_pairs: begin, page {page}")
        kvps: List[KeyValuePair] = []
        try:
            for raw in self._kvp_records(page):
                try:
                    record = AdpKeyValueRecord.model_validate(raw)
                except ValidationError as e:
                    _log.debug(f"key_value_pairs: skipping malformed KVP record: {e}")
                    continue
                kvps.append(extract_key_value_pair(record))
        except _RECOVERABLE as e:
            _log.warning(f"key_value_pairs: could not get KVPs for page {page}: {e}")
        log_key_value_pairs(kvps)
        return kvps

    def table_key_value_pairs(self, page: int) -> List[KeyValuePair]:
        _log.debug(f"table_key_value_pairs: begin, page {page}")
        tables: List[KeyValuePair] = []
        try:
            for raw in self._kvp_records(page):
                try:
                    record = AdpKeyValueRecord.model_validate(raw)
                except ValidationError as e:
                    _log.debug(
                        f"table_key_value_pairs: skipping malformed KVP record: {e}"
                    )
                    continue
                table = extract_table_key_value_pair(record)
                if table is not None:
                    tables.append(table)
        except _RECOVERABLE as e:
            _log.warning(
                f"table_key_value_pairs: could not get table KVPs for page {page}: {e}"
            )
        log_key_value_pairs(tables)
        return tables
