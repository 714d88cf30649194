from typing import List, Optional

from pydantic import BaseModel, Field

from adp_layout.datamodels.geometry import PageLocation

# Field variable names shared with the field store.
ADP_KEY_CLASS_NAME = "ADPKeyClassName"
ADP_KEY_CLASS_CONFIDENCE = "ADPKeyClassConfidence"
ADP_SENSITIVITY = "ADPSensitivity"
ADP_LINE_ITEM_ID = "ADPLineItemID"
ADP_SEQ_LINE_ITEM_ID = "ADPSeqLineItemID"
ADP_DOC_TYPE = "ADPDocType"


class KeyValuePair(BaseModel):
    """A key-value extraction, possibly carrying nested line items or cells.

    Boxes are kept the way the analyzer reports them (``x, y, width, height``);
    a table KVP's ``nested`` holds line items and a line item's ``nested``
    holds cells.
    """

    key: str = ""
    value: str = ""
    key_x: int = 0
    key_y: int = 0
    key_width: int = 0
    key_height: int = 0
    value_x: int = 0
    value_y: int = 0
    value_width: int = 0
    value_height: int = 0
    key_class: str = ""
    key_class_id: Optional[str] = None
    key_class_confidence: Optional[str] = None
    kvp_id: Optional[str] = None
    original_key: Optional[str] = None
    original_value: Optional[str] = None
    confidence: int = 0
    sensitivity: bool = False
    has_line_item: bool = False
    line_item_id: int = 0
    seq_line_item_id: int = 0
    nested: List["KeyValuePair"] = Field(default_factory=list)

    @property
    def key_location(self) -> PageLocation:
        return PageLocation.from_xywh(
            self.key_x, self.key_y, self.key_width, self.key_height
        )

    @property
    def value_location(self) -> PageLocation:
        return PageLocation.from_xywh(
            self.value_x, self.value_y, self.value_width, self.value_height
        )

    @property
    def tier(self) -> Optional[str]:
        """Key class confidence trimmed and lower-cased, or None when unset."""
        if self.key_class_confidence is None:
            return None
        return self.key_class_confidence.strip().lower()

    def describe(self) -> str:
        """One-line summary used in debug logs."""
        return (
            f"{self.key_class}: {self.value} key loc ({self.key_location}) "
            f"value loc ({self.value_location}) key width/height "
            f"({self.key_width}, {self.key_height}) value width/height "
            f"({self.value_width}, {self.value_height})"
        )


class RankEntry(BaseModel):
    page_no: int = 0
    kvp_id: Optional[str] = None
    reserved: Optional[str] = None


class Ranking(BaseModel):
    """Best-to-worst order of the KVPs the analyzer found for one key class."""

    key_class_id: Optional[str] = None
    key_class_name: Optional[str] = None
    key_class_type: Optional[str] = None
    ranked_list: List[RankEntry] = Field(default_factory=list)


class DocumentClass(BaseModel):
    name: Optional[str] = None
    class_match: Optional[str] = None


class PageDimensions(BaseModel):
    page_width: int = 0
    page_height: int = 0
    dpi_x: int = 0
    dpi_y: int = 0
    page_ocr_confidence: float = 0.0
