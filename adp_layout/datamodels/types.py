import logging
from enum import Enum
from typing import Optional

_log = logging.getLogger(__name__)


class LayoutNodeKind(str, Enum):
    """Kinds of nodes in a reconstructed page layout."""

    BLOCK = "block"
    PARAGRAPH = "paragraph"
    LINE = "line"
    TABLE = "table"
    PICTURE = "picture"
    CELL = "cell"
    ROW = "row"
    PAGE = "page"
    WORD = "word"
    WORD_GROUP = "word_group"
    WORD_GROUP_LINE = "word_group_line"
    WORD_GROUP_BLOCK = "word_group_block"
    WG_TABLE = "wg_table"
    WG_ROW = "wg_row"
    WG_COLUMN = "wg_column"
    ROW_GROUP = "row_group"


class KeyClassTier(str, Enum):
    """Normalized confidence bucket of a key class."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_score(cls, score: float) -> "KeyClassTier":
        if score >= 80:
            return cls.HIGH
        elif score >= 60:
            return cls.MEDIUM
        return cls.LOW


class FieldsAction(str, Enum):
    """Retention rule applied to the extracted key-value pairs."""

    KEEP_ALL = "keepall"
    KEEP_ALL_WITH_KEY_CLASS = "keepallwithkeyclass"
    KEEP_SINGLE_BEST = "keepsinglebest"
    KEEP_SINGLE_BEST_WITH_KEY_CLASS = "keepsinglebestwithkeyclass"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FieldsAction":
        """Parse a configured mode name, falling back to KEEP_ALL."""
        if value is None or len(value.strip()) == 0:
            _log.warning("No fields action given, keeping all key-value pairs")
            return cls.KEEP_ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            _log.warning(
                f"Invalid fields action {value!r}, keeping all key-value pairs"
            )
            return cls.KEEP_ALL


class ConfidenceAction(str, Enum):
    """Post-hoc filter applied to materialized fields by key class tier."""

    KEEP_ALL = "keepall"
    KEEP_HIGH = "keephigh"
    KEEP_MEDIUM = "keepmedium"
    DELETE_ALL = "deleteall"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ConfidenceAction":
        """Parse a configured confidence action, falling back to KEEP_ALL."""
        if value is None or len(value.strip()) == 0:
            _log.warning("No confidence action given, keeping all fields")
            return cls.KEEP_ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            _log.warning(f"Invalid confidence action {value!r}, keeping all fields")
            return cls.KEEP_ALL
