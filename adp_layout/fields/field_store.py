"""Hierarchical field records written by field materialization.

A page owns fields, a table field owns line-item fields and a line-item field
owns cell fields. :class:`FieldStore` is the interface materialization writes
through; :class:`FieldRecord` is the in-memory implementation serialized by
the CLI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from adp_layout.datamodels.key_value import ADP_KEY_CLASS_CONFIDENCE
from adp_layout.datamodels.types import ConfidenceAction

_log = logging.getLogger(__name__)

ENTITY_TYPE = "entityType"
ADP_ENTITY_TYPE = "ADP"


class FieldStore(Protocol):
    """Create-or-find-by-name store of named fields with string variables."""

    name: str
    type: str
    text: str
    status: int

    @property
    def children(self) -> List["FieldStore"]: ...

    def find_child(self, name: str) -> Optional["FieldStore"]: ...

    def has_child(self, name: str) -> bool: ...

    def add_child(self, name: str) -> "FieldStore": ...

    def set_variable(self, name: str, value: str) -> None: ...

    def get_variable(self, name: str) -> Optional[str]: ...

    def delete_child(self, child: "FieldStore") -> None: ...


class FieldRecord(BaseModel):
    """One field: a page, a KVP, a table line item or a table cell."""

    name: str = ""
    type: str = ""
    text: str = ""
    status: int = 0
    variables: Dict[str, str] = Field(default_factory=dict)
    children: List[FieldRecord] = Field(default_factory=list)

    def find_child(self, name: str) -> Optional[FieldRecord]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def has_child(self, name: str) -> bool:
        return self.find_child(name) is not None

    def add_child(self, name: str) -> FieldRecord:
        """Return the child called ``name``, creating it when it does not exist."""
        child = self.find_child(name)
        if child is None:
            child = FieldRecord(name=name)
            self.children.append(child)
        return child

    def set_variable(self, name: str, value: str) -> None:
        self.variables[name] = value

    def get_variable(self, name: str) -> Optional[str]:
        return self.variables.get(name)

    def delete_child(self, child: FieldRecord) -> None:
        for index, existing in enumerate(self.children):
            if existing is child:
                del self.children[index]
                return

    def save_as_json(self, path: Path) -> None:
        with open(path, "w", encoding="utf-8") as fw:
            json.dump(self.model_dump(mode="json"), fw, ensure_ascii=False, indent=2)


def fields_file_name(page_id: str) -> str:
    return f"{page_id}_fields.json"


def _should_delete(field: FieldStore, action: ConfidenceAction) -> bool:
    if action == ConfidenceAction.DELETE_ALL:
        return True
    tier = field.get_variable(ADP_KEY_CLASS_CONFIDENCE)
    if tier is None:
        return False
    tier = tier.strip().lower()
    if action == ConfidenceAction.KEEP_HIGH:
        return tier != "high"
    if action == ConfidenceAction.KEEP_MEDIUM:
        return tier == "low"
    return False


def remove_unneeded_fields(page: FieldStore, action: ConfidenceAction) -> int:
    """Delete the page's analyzer fields that ``action`` does not retain.

    Only direct children with ``entityType == "ADP"`` are considered; fields
    without a key class confidence survive every mode except DELETE_ALL.
    Returns the number of fields deleted.
    """
    _log.debug(f"Removing unneeded fields from page {page.name}: {action.value}")
    if action == ConfidenceAction.KEEP_ALL:
        return 0
    deleted = 0
    for field in reversed(list(page.children)):
        if field.get_variable(ENTITY_TYPE) != ADP_ENTITY_TYPE:
            continue
        if _should_delete(field, action):
            _log.debug(
                f"Deleting field {field.name}: key ({field.get_variable('KeyPosition')}) "
                f"{field.get_variable('KeyMatch')}, value "
                f"({field.get_variable('Position')}) {field.get_variable('subMatch1')}"
            )
            page.delete_child(field)
            deleted += 1
    return deleted
