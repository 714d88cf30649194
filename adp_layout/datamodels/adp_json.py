"""Typed view of the analyzer JSON.

The analyzer is loose about types: coordinates may come as floats, font sizes
and confidences as strings or numbers, and most fields may be absent. These
models pin each of those down once, at the boundary, so the converters never
have to guess what shape a value has.
"""

import logging
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)

_log = logging.getLogger(__name__)


def _lenient_int(value: Any) -> Any:
    try:
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                return int(float(text))
    except OverflowError as e:
        # pydantic only reports ValueError and AssertionError as validation errors
        raise ValueError(f"{value!r} is too large for a coordinate") from e
    return value


def _optional_text(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


Coord = Annotated[int, BeforeValidator(_lenient_int)]
Text = Annotated[Optional[str], BeforeValidator(_optional_text)]

# A value the analyzer may send as a string, an integer or a float.
Scalar = Union[StrictStr, StrictInt, StrictFloat]

_BOOL_WORDS = ("true", "false", "1", "0", "yes", "no")


class _AdpModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AdpWord(_AdpModel):
    x: Coord = Field(alias="WordStartX")
    y: Coord = Field(alias="WordStartY")
    width: Coord = Field(alias="WordWidth")
    height: Coord = Field(alias="WordHeight")
    value: Text = Field(default="", alias="WordValue")
    ocr_confidence: Text = Field(default="", alias="WordOCRConfidence")
    font_size: Text = Field(default=None, alias="WordFontSize")


class AdpLine(_AdpModel):
    x: Coord = Field(alias="LineStartX")
    y: Coord = Field(alias="LineStartY")
    width: Coord = Field(alias="LineWidth")
    height: Coord = Field(alias="LineHeight")
    words: List[AdpWord] = Field(default_factory=list, alias="WordList")


class AdpBlock(_AdpModel):
    x: Coord = Field(alias="BlockStartX")
    y: Coord = Field(alias="BlockStartY")
    width: Coord = Field(alias="BlockWidth")
    height: Coord = Field(alias="BlockHeight")
    lines: List[AdpLine] = Field(default_factory=list, alias="LineList")


class AdpCell(_AdpModel):
    x: Coord = Field(alias="CellStartX")
    y: Coord = Field(alias="CellStartY")
    width: Coord = Field(alias="CellWidth")
    height: Coord = Field(alias="CellHeight")
    lines: List[AdpLine] = Field(default_factory=list, alias="LineList")


class AdpRow(_AdpModel):
    x: Coord = Field(alias="RowStartX")
    y: Coord = Field(alias="RowStartY")
    width: Coord = Field(alias="RowWidth")
    height: Coord = Field(alias="RowHeight")
    cells: List[AdpCell] = Field(default_factory=list, alias="CellList")


class AdpTable(_AdpModel):
    x: Coord = Field(alias="TableStartX")
    y: Coord = Field(alias="TableStartY")
    width: Coord = Field(alias="TableWidth")
    height: Coord = Field(alias="TableHeight")
    rows: List[AdpRow] = Field(default_factory=list, alias="RowList")


class AdpComplexStructure(_AdpModel):
    attributes: List["AdpKeyValueRecord"] = Field(
        default_factory=list, alias="Attributes"
    )


class AdpKeyValueRecord(_AdpModel):
    """One entry of ``KVPTable``, or an attribute/line item nested inside one."""

    key: Text = Field(default=None, alias="Key")
    value: Text = Field(default=None, alias="Value")
    value_type: Text = Field(default=None, alias="ValueType")
    key_class: Text = Field(default=None, alias="KeyClass")
    key_class_id: Text = Field(default=None, alias="KeyClassID")
    key_class_confidence: Optional[Scalar] = Field(
        default=None, alias="KeyClassConfidence"
    )
    kvp_id: Text = Field(default=None, alias="KVPID")
    value_confidence: Optional[Scalar] = Field(default=None, alias="ValueConfidence")
    sensitivity: Optional[bool] = Field(default=None, alias="Sensitivity")
    key_x: Optional[Scalar] = Field(default=None, alias="KeyStartX")
    key_y: Optional[Scalar] = Field(default=None, alias="KeyStartY")
    key_width: Optional[Scalar] = Field(default=None, alias="KeyWidth")
    key_height: Optional[Scalar] = Field(default=None, alias="KeyHeight")
    value_x: Optional[Scalar] = Field(default=None, alias="ValueStartX")
    value_y: Optional[Scalar] = Field(default=None, alias="ValueStartY")
    value_width: Optional[Scalar] = Field(default=None, alias="ValueWidth")
    value_height: Optional[Scalar] = Field(default=None, alias="ValueHeight")
    original_key: Text = Field(default=None, alias="OriginalKey")
    original_value: Text = Field(default=None, alias="OriginalValue")
    line_item_id: Optional[Scalar] = Field(default=None, alias="LineItemID")
    seq_line_item_id: Optional[Scalar] = Field(default=None, alias="SeqLineItemID")
    value_list: List["AdpKeyValueRecord"] = Field(
        default_factory=list, alias="ValueList"
    )
    complex_structure: Optional[AdpComplexStructure] = Field(
        default=None, alias="ComplexKVPStructure"
    )

    @field_validator("key_class_confidence", "value_confidence", mode="before")
    @classmethod
    def _drop_unsupported_scalar(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            _log.debug(f"Ignoring confidence value {value!r}")
            return None
        return value

    @field_validator("sensitivity", mode="before")
    @classmethod
    def _lenient_sensitivity(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _BOOL_WORDS:
            return value.strip()
        if isinstance(value, int) and value in (0, 1):
            return value
        _log.debug(f"Ignoring sensitivity value {value!r}")
        return None

    @property
    def is_table(self) -> bool:
        return (self.value_type or "").lower() == "table"


AdpComplexStructure.model_rebuild()
AdpKeyValueRecord.model_rebuild()


class AdpPageInfo(_AdpModel):
    dpi_x: Coord = Field(default=0, alias="dpix")
    dpi_y: Coord = Field(default=0, alias="dpiy")
    page_width: Coord = Field(default=0, alias="PageWidth")
    page_height: Coord = Field(default=0, alias="PageHeight")
    page_ocr_confidence: float = Field(default=0.0, alias="PageOCRConfidence")


class AdpRankEntry(_AdpModel):
    page_no: Coord = Field(default=0, alias="PageNo")
    kvp_id: Text = Field(default=None, alias="KVPID")
    reserved: Text = Field(default=None, alias="Reserved1")


class AdpKeyClassRanking(_AdpModel):
    key_class_id: Text = Field(default=None, alias="KeyClassID")
    key_class_name: Text = Field(default=None, alias="KeyClassName")
    key_class_type: Text = Field(default=None, alias="KeyClassType")
    ranked_list: List[AdpRankEntry] = Field(
        default_factory=list, alias="KVPRankedList"
    )


class AdpAlternateClass(_AdpModel):
    name: Text = Field(default=None, alias="Name")
    class_match: Text = Field(default=None, alias="ClassMatch")


class AdpDocumentClass(_AdpModel):
    actual: Text = Field(default=None, alias="Actual")
    class_match: Text = Field(default=None, alias="ClassMatch")


class AdpClassification(_AdpModel):
    document_class: AdpDocumentClass = Field(alias="DocumentClass")
    alternates: List[AdpAlternateClass] = Field(
        default_factory=list, alias="AlternateDocumentClass"
    )
