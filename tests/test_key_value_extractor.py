from pathlib import Path

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.converters.key_value_extractor import (
    extract_key_value_pair,
    extract_table_key_value_pair,
)
from adp_layout.datamodels.adp_json import AdpKeyValueRecord

SAMPLE_JSON = Path(__file__).parent / "data" / "sample_adp_result.json"


def _record(**fields) -> AdpKeyValueRecord:
    return AdpKeyValueRecord.model_validate(fields)


def test_flat_kvp_fields():
    kvp = extract_key_value_pair(
        _record(
            Key="Invoice Number",
            Value="12345",
            KeyClass="InvoiceNumber",
            KeyClassID="kc1",
            KeyClassConfidence="High",
            KVPID="kvp-1",
            ValueType="string",
            ValueConfidence=9,
            Sensitivity=True,
            KeyStartX=1,
            KeyStartY=2,
            KeyWidth=3,
            KeyHeight=4,
            ValueStartX=10,
            ValueStartY=20,
            ValueWidth=30,
            ValueHeight=40,
            OriginalKey="Number",
        )
    )
    assert kvp.key == "Invoice Number"
    assert kvp.value == "12345"
    assert kvp.key_class == "InvoiceNumber"
    assert kvp.key_class_id == "kc1"
    assert kvp.kvp_id == "kvp-1"
    assert kvp.key_class_confidence == "High"
    assert kvp.confidence == 100
    assert kvp.sensitivity is True
    assert kvp.key_location.position == "1,2,4,6"
    assert kvp.value_location.position == "10,20,40,60"
    assert kvp.original_key == "Number"
    assert kvp.tier == "high"


def _tier(raw) -> str:
    return extract_key_value_pair(_record(KeyClassConfidence=raw)).key_class_confidence


def test_numeric_key_class_confidence_is_bucketed():
    assert _tier(85) == "High"
    assert _tier(65.0) == "Medium"
    # Numbers serialized as strings go through the second pass
    assert _tier("42") == "Low"
    assert _tier("") == "Low"


def test_unsupported_values_keep_defaults():
    kvp = extract_key_value_pair(
        _record(Key="k", KeyClassConfidence=[1, 2], Sensitivity="maybe")
    )
    assert kvp.key_class_confidence is None
    assert kvp.tier is None
    assert kvp.sensitivity is False
    assert kvp.confidence == 0


def test_uncoercible_coordinates_become_minus_one():
    kvp = extract_key_value_pair(
        _record(Key="k", Value="v", ValueStartX="left", KeyStartY="top")
    )
    assert kvp.value_x == -1
    assert kvp.key_y == -1
    assert kvp.value_y == 0


def test_key_box_skipped_for_tables_and_missing_values():
    table_like = extract_key_value_pair(
        _record(Key="Items", Value="_TABLE_ZONE_", ValueType="table", KeyStartX=5)
    )
    assert table_like.key_x == 0

    no_value = extract_key_value_pair(_record(Key="Orphan", KeyStartX=5))
    assert no_value.key_x == 0
    assert no_value.value == ""


def test_non_table_records_have_no_table_kvp():
    assert extract_table_key_value_pair(_record(Key="k", ValueType="string")) is None
    assert extract_table_key_value_pair(_record(Key="k")) is None
    assert extract_table_key_value_pair(_record(Key="k", ValueType="Table")) is None


def _line_item(*attributes, **fields):
    return dict(
        ComplexKVPStructure={"Attributes": list(attributes)},
        **fields,
    )


def test_table_kvp_nesting():
    record = _record(
        Key="Items",
        Value="_TABLE_ZONE_",
        ValueType="table",
        KeyClass="LineItems",
        KeyClassConfidence=90,
        KeyStartX=5,
        ComplexKVPStructure={
            "Attributes": [
                {
                    "ValueList": [
                        _line_item(
                            {"Key": "Qty", "Value": "5", "KeyClassConfidence": 77},
                            {"Key": "Price", "Value": ""},
                            LineItemID=3,
                            SeqLineItemID="4",
                        )
                    ]
                }
            ]
        },
    )
    table = extract_table_key_value_pair(record)

    assert table is not None
    assert table.key_class == "LineItems"
    assert table.key_class_confidence == "High"
    assert table.key_x == 0

    line_item = table.nested[0]
    assert line_item.has_line_item
    assert line_item.line_item_id == 3
    assert line_item.seq_line_item_id == 4

    assert len(line_item.nested) == 1
    cell = line_item.nested[0]
    assert cell.key == "Qty"
    assert cell.value == "5"
    # Cells keep the confidence text as sent
    assert cell.key_class_confidence == "77"


def test_line_item_without_ids():
    record = _record(
        Key="Items",
        Value="rows",
        ValueType="table",
        KeyStartX=5,
        ComplexKVPStructure={
            "Attributes": [{"ValueList": [_line_item({"Key": "A", "Value": "1"})]}]
        },
    )
    table = extract_table_key_value_pair(record)

    assert table.key_x == 5
    assert not table.nested[0].has_line_item
    assert table.nested[0].nested[0].key == "A"


def test_sample_page_kvps():
    results = AnalyzerResults.from_file(SAMPLE_JSON)

    kvps = results.key_value_pairs(0)
    assert [kvp.kvp_id for kvp in kvps] == ["kvp-1", "kvp-2", "kvp-3", "kvp-4"]
    tiers = [kvp.key_class_confidence for kvp in kvps]
    assert tiers == ["High", "Medium", "Low", "High"]
    assert [kvp.confidence for kvp in kvps] == [100, 60, 90, 0]
    assert kvps[2].sensitivity is True

    tables = results.table_key_value_pairs(0)
    assert len(tables) == 1
    cells = tables[0].nested[0].nested
    assert [(cell.key, cell.value) for cell in cells] == [
        ("Item", "Widget"),
        ("Qty", "5"),
    ]
    assert tables[0].nested[0].nested[1].key == "Qty"
    assert tables[0].nested[0].nested[1].value == "5"
    assert tables[0].nested[0].line_item_id == 1

    assert results.key_value_pairs(1) == []
