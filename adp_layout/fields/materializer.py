"""Write classification results and key-value pairs into a page's fields.

Normal KVPs are emitted tier by tier (high, medium, low). As soon as one KVP
of a key class is emitted, every later KVP of the same class is emitted right
after it, so a key class's fields stay together. Table KVPs follow as a
table field with one child per line item and one grandchild per cell.
"""

import functools
import logging
from typing import List, Optional, Set

from adp_layout.datamodels.key_value import (
    ADP_DOC_TYPE,
    ADP_KEY_CLASS_CONFIDENCE,
    ADP_KEY_CLASS_NAME,
    ADP_LINE_ITEM_ID,
    ADP_SEQ_LINE_ITEM_ID,
    ADP_SENSITIVITY,
    DocumentClass,
    KeyValuePair,
)
from adp_layout.fields.field_store import ADP_ENTITY_TYPE, ENTITY_TYPE, FieldStore

_log = logging.getLogger(__name__)

TIERS = ("high", "medium", "low")
MAX_NAME_INDEX = 100
LINE_ITEM_NAME = "Lineitem"
# Fields at or above this confidence are marked as not needing review.
VALID_CONFIDENCE = 90


def compare_key_value_pairs(first: KeyValuePair, second: KeyValuePair) -> int:
    """Order KVPs by key class tier, then by value box, then by key box.

    The tier only takes part when both KVPs have one.
    """
    if first.tier is not None and second.tier is not None:
        for tier in ("high", "medium"):
            if first.tier == tier and second.tier != tier:
                return -1
            elif first.tier != tier and second.tier == tier:
                return 1

    first_position = (
        first.value_y,
        first.value_x,
        first.value_height,
        first.value_width,
        first.key_y,
        first.key_x,
        first.key_height,
        first.key_width,
    )
    second_position = (
        second.value_y,
        second.value_x,
        second.value_height,
        second.value_width,
        second.key_y,
        second.key_x,
        second.key_height,
        second.key_width,
    )
    if first_position < second_position:
        return -1
    elif first_position > second_position:
        return 1
    return 0


def sort_key_value_pairs(kvps: List[KeyValuePair]) -> List[KeyValuePair]:
    return sorted(kvps, key=functools.cmp_to_key(compare_key_value_pairs))


def count_for_key_class(kvp: KeyValuePair, kvps: List[KeyValuePair]) -> int:
    """Number of ``kvps`` sharing ``kvp``'s key class, ignoring surrounding blanks."""
    key_class = kvp.key_class.strip()
    return sum(1 for other in kvps if other.key_class.strip() == key_class)


def field_name(
    parent: FieldStore,
    base: str,
    count: int,
    field_suffix: str,
) -> str:
    """Pick a field name under ``parent`` for a KVP of a class seen ``count`` times.

    With several KVPs of the class, the first free ``<base><suffix>_<n>`` is
    used. Otherwise ``<base><suffix>`` is used when free. When no candidate is
    free the bare ``base`` is returned, and the existing field of that name
    is reused.
    """
    index = 0
    while True:
        candidate = base + field_suffix
        if count > 1:
            candidate = f"{candidate}_{index}"
        if not parent.has_child(candidate):
            return candidate
        if count == 1:
            return base
        index += 1
        if index > MAX_NAME_INDEX:
            _log.debug(
                f"More than {MAX_NAME_INDEX} fields named after {base}, "
                f"last tried {candidate}, reusing {base}"
            )
            return base


def update_field(
    field: FieldStore, kvp: KeyValuePair, name: str, type_name: str
) -> None:
    """Copy a KVP's text, boxes and key class details onto ``field``."""
    key_location = kvp.key_location
    value_location = kvp.value_location

    field.type = type_name
    field.text = kvp.value
    field.status = 0 if kvp.confidence >= VALID_CONFIDENCE else 1

    field.set_variable(ENTITY_TYPE, ADP_ENTITY_TYPE)
    field.set_variable("KeyMatch", kvp.key)
    field.set_variable("KeyPosition", key_location.position)
    field.set_variable("Position", value_location.position)
    field.set_variable("l", str(value_location.l))
    field.set_variable("t", str(value_location.t))
    field.set_variable("r", str(value_location.r))
    field.set_variable("b", str(value_location.b))
    field.set_variable("confidence", str(kvp.confidence))
    field.set_variable("validityPercentage", str(kvp.confidence))
    field.set_variable("label", name)
    field.set_variable("subMatch1", kvp.value)
    field.set_variable("entityName", name)

    field.set_variable(ADP_KEY_CLASS_NAME, kvp.key_class)
    field.set_variable(ADP_KEY_CLASS_CONFIDENCE, kvp.key_class_confidence or "")
    field.set_variable(ADP_SENSITIVITY, str(kvp.sensitivity))
    if kvp.has_line_item:
        field.set_variable(ADP_LINE_ITEM_ID, str(kvp.line_item_id))
        field.set_variable(ADP_SEQ_LINE_ITEM_ID, str(kvp.seq_line_item_id))


def set_field(
    kvp: KeyValuePair,
    parent: FieldStore,
    suffix: str,
    count: int,
    field_suffix: str,
    name_override: Optional[str] = None,
) -> FieldStore:
    """Create or update the field for one KVP under ``parent`` and return it."""
    _log.debug(f"set_field: {count} fields for key class {kvp.key_class}")
    base = name_override if name_override is not None else kvp.key_class
    if len(base.strip()) == 0:
        base = kvp.key
    name = field_name(parent, base, count, field_suffix) + suffix
    field = parent.add_child(name)
    update_field(field, kvp, name, type_name=base)
    return field


def add_classification(page: FieldStore, document_classes: List[DocumentClass]) -> None:
    if not document_classes:
        return
    primary = document_classes[0]
    page.set_variable(ADP_DOC_TYPE, primary.name or "")
    page.set_variable(f"{ADP_DOC_TYPE}Confidence", primary.class_match or "")
    for i, document_class in enumerate(document_classes):
        page.set_variable(f"{ADP_DOC_TYPE}_{i}", document_class.name or "")
        page.set_variable(
            f"{ADP_DOC_TYPE}_{i}Confidence", document_class.class_match or ""
        )


def _same_key_class(first: KeyValuePair, second: KeyValuePair) -> bool:
    return first.key_class.strip().lower() == second.key_class.strip().lower()


def add_normal_fields(
    page: FieldStore, kvps: List[KeyValuePair], field_suffix: str
) -> List[KeyValuePair]:
    """Emit the normal KVPs grouped by key class; returns them in emission order."""
    ordered = sort_key_value_pairs(kvps)
    for kvp in ordered:
        _log.debug(f"Sorted KVP: {kvp.describe()}")

    emitted: Set[int] = set()
    emission_order: List[KeyValuePair] = []

    def emit(index: int, count: int) -> None:
        set_field(ordered[index], page, "", count, field_suffix)
        emitted.add(index)
        emission_order.append(ordered[index])

    for tier in TIERS:
        for i, kvp in enumerate(ordered):
            if i in emitted:
                continue
            count = count_for_key_class(kvp, ordered)
            if kvp.tier is None:
                _log.debug(f"KVP {i} has no key class confidence, not adding it")
                continue
            if kvp.tier != tier:
                continue
            emit(i, count)
            for sweep_tier in TIERS:
                for j in range(i + 1, len(ordered)):
                    other = ordered[j]
                    if (
                        j not in emitted
                        and other.tier is not None
                        and other.tier == sweep_tier
                        and _same_key_class(kvp, other)
                    ):
                        emit(j, count)
                        _log.debug(f"Added KVP {j} with key class {other.key_class}")
    return emission_order


def add_table_fields(
    page: FieldStore,
    table_kvps: List[KeyValuePair],
    normal_kvps: List[KeyValuePair],
    field_suffix: str,
) -> None:
    for table in table_kvps:
        count = count_for_key_class(table, normal_kvps)
        table_field = set_field(table, page, "", count, field_suffix)
        for row_number, line_item in enumerate(table.nested):
            row_field = set_field(
                line_item,
                table_field,
                str(row_number),
                0,
                field_suffix,
                name_override=LINE_ITEM_NAME,
            )
            for cell in line_item.nested:
                set_field(cell, row_field, "", 0, field_suffix)


def add_fields(
    page: FieldStore,
    document_classes: List[DocumentClass],
    normal_kvps: List[KeyValuePair],
    table_kvps: List[KeyValuePair],
    field_suffix: str,
) -> None:
    """Write classification variables, then normal KVP fields, then table fields."""
    _log.debug(f"add_fields: start, page {page.name}")
    add_classification(page, document_classes)
    add_normal_fields(page, normal_kvps, field_suffix)
    add_table_fields(page, table_kvps, normal_kvps, field_suffix)
    _log.debug(f"add_fields: end, page {page.name} has {len(page.children)} fields")
