"""Turn ``KVPTable`` records into :class:`KeyValuePair` objects.

Flat records keep their key box only when the value is not a table. Table
records are rebuilt with their line items (``ComplexKVPStructure.Attributes[]
.ValueList[]``) and the cells of each line item.
"""

import logging
from typing import List, Optional

from adp_layout.datamodels.adp_json import AdpKeyValueRecord
from adp_layout.datamodels.key_value import KeyValuePair
from adp_layout.utils.confidence import (
    rebucket_numeric_tier,
    tier_from_confidence,
    value_confidence,
)
from adp_layout.utils.values import coerce_int

_log = logging.getLogger(__name__)

TABLE_ZONE_VALUE = "_TABLE_ZONE_"


def _coerce(value, context: Optional[str] = None) -> Optional[int]:
    if value is None:
        return None
    return coerce_int(value, context)


def _apply_value_box(
    kvp: KeyValuePair, record: AdpKeyValueRecord, context: str
) -> None:
    for attr in ("value_x", "value_y", "value_width", "value_height"):
        coerced = _coerce(getattr(record, attr), f"{context}, {attr}")
        if coerced is not None:
            setattr(kvp, attr, coerced)


def _apply_key_box(
    kvp: KeyValuePair, record: AdpKeyValueRecord, context: str
) -> None:
    for attr in ("key_x", "key_y", "key_width", "key_height"):
        coerced = _coerce(getattr(record, attr), f"{context}, {attr}")
        if coerced is not None:
            setattr(kvp, attr, coerced)
    if record.original_key is not None:
        kvp.original_key = record.original_key
    if record.original_value is not None:
        kvp.original_value = record.original_value


def extract_key_value_pair(record: AdpKeyValueRecord) -> KeyValuePair:
    """Build a flat KVP from one ``KVPTable`` record.

    The key class confidence goes through two passes: the typed value is
    normalized first, then the result is re-parsed in case a number was
    serialized as a string.
    """
    kvp = KeyValuePair()
    if record.key_class is not None:
        kvp.key_class = record.key_class

    if record.key_class_confidence is not None:
        kvp.key_class_confidence = tier_from_confidence(record.key_class_confidence)
        if kvp.key_class_confidence is None:
            _log.debug(f"KVP has invalid KeyClassConfidence: {record.key}")
    kvp.key_class_confidence = rebucket_numeric_tier(kvp.key_class_confidence)

    if record.key is not None:
        kvp.key = record.key
    if record.value is not None:
        kvp.value = record.value
    _apply_value_box(kvp, record, f"key {record.key}")
    if record.sensitivity is not None:
        kvp.sensitivity = record.sensitivity
    if record.value_confidence is not None:
        kvp.confidence = value_confidence(coerce_int(record.value_confidence))

    if record.value is not None and not record.is_table:
        _apply_key_box(kvp, record, f"key {record.key}")

    kvp.kvp_id = record.kvp_id
    kvp.key_class_id = record.key_class_id
    _log.debug(
        f"Examining KVP, key class: {kvp.key_class}, key: {kvp.key}, "
        f"value: {kvp.value}, ID: {kvp.kvp_id}"
    )
    return kvp


def _extract_cell(
    attribute: AdpKeyValueRecord, row_index: int, attribute_index: int
) -> KeyValuePair:
    context = f"table row {row_index}, attribute {attribute_index}"
    cell = KeyValuePair()
    if attribute.key_class is not None:
        cell.key_class = attribute.key_class
    if attribute.key_class_confidence is not None:
        cell.key_class_confidence = str(attribute.key_class_confidence)
    cell.key = attribute.key or ""
    cell.value = attribute.value or ""
    _apply_value_box(cell, attribute, context)
    _apply_key_box(cell, attribute, context)
    if attribute.value_confidence is not None:
        cell.confidence = value_confidence(coerce_int(attribute.value_confidence))
    if attribute.sensitivity is not None:
        cell.sensitivity = attribute.sensitivity
    return cell


def _extract_line_item(
    source: AdpKeyValueRecord, row_index: int, table_key: Optional[str]
) -> KeyValuePair:
    line_item = KeyValuePair()
    _apply_value_box(line_item, source, f"table row {row_index}")
    if source.line_item_id is not None:
        line_item.line_item_id = coerce_int(source.line_item_id)
    if source.seq_line_item_id is not None:
        line_item.seq_line_item_id = coerce_int(source.seq_line_item_id)
    if source.sensitivity is not None:
        line_item.sensitivity = source.sensitivity
    line_item.has_line_item = (
        source.line_item_id is not None and source.seq_line_item_id is not None
    )

    attributes = source.complex_structure.attributes if source.complex_structure else []
    for attribute_index, attribute in enumerate(attributes):
        _log.debug(f"Line item {attribute.key}: {attribute.value}")
        if attribute.key and attribute.value:
            cell = _extract_cell(attribute, row_index, attribute_index)
            line_item.nested.append(cell)
            _log.debug(f"Added nested item {cell.key}({cell.value}) to key {table_key}")
        else:
            _log.debug("Skipping empty nested item")
    return line_item


def extract_table_key_value_pair(record: AdpKeyValueRecord) -> Optional[KeyValuePair]:
    """Build a table KVP with its line items and cells; None for non-table records."""
    if not record.is_table:
        _log.debug(f"Key {record.key} is not ValueType table, skipping it")
        return None
    if record.complex_structure is None:
        _log.debug(f"Key {record.key} has no ComplexKVPStructure, skipping it")
        return None

    table = KeyValuePair()
    if record.key_class is not None:
        table.key_class = record.key_class
    # Table records only take the typed branch of the tier normalization.
    if record.key_class_confidence is not None:
        table.key_class_confidence = tier_from_confidence(record.key_class_confidence)
    if record.key is not None:
        table.key = record.key
    if record.value is not None:
        table.value = record.value
    _apply_value_box(table, record, f"table {record.key}")
    if record.sensitivity is not None:
        table.sensitivity = record.sensitivity
    if record.value is not None and record.value != TABLE_ZONE_VALUE:
        _apply_key_box(table, record, f"table {record.key}")

    for row_index, attribute in enumerate(record.complex_structure.attributes):
        for source in attribute.value_list:
            table.nested.append(_extract_line_item(source, row_index, record.key))
    return table


def log_key_value_pairs(kvps: List[KeyValuePair], prefix: str = "") -> None:
    if not _log.isEnabledFor(logging.DEBUG):
        return
    for kvp in kvps:
        _log.debug(f"{prefix}{kvp.describe()}")
        for line_item in kvp.nested:
            log_key_value_pairs(line_item.nested, prefix + "    ")
