from pathlib import Path

import pytest

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.datamodels.key_value import DocumentClass, KeyValuePair
from adp_layout.fields.field_store import FieldRecord
from adp_layout.fields.materializer import (
    add_classification,
    add_fields,
    add_normal_fields,
    compare_key_value_pairs,
    count_for_key_class,
    field_name,
    set_field,
    sort_key_value_pairs,
)

SAMPLE_JSON = Path(__file__).parent / "data" / "sample_adp_result.json"


def _kvp(key_class="Total", tier="High", value_y=0, value_x=0, key=None, **fields):
    return KeyValuePair(
        key=key or f"key {key_class}",
        key_class=key_class,
        key_class_confidence=tier,
        value_y=value_y,
        value_x=value_x,
        **fields,
    )


@pytest.fixture
def sample_page() -> FieldRecord:
    results = AnalyzerResults.from_file(SAMPLE_JSON)
    page = FieldRecord(name="page_0", type="Page")
    add_fields(
        page,
        results.document_classes(),
        results.key_value_pairs(0),
        results.table_key_value_pairs(0),
        "_ADP",
    )
    return page


def test_tier_orders_before_position():
    high = _kvp(tier="High", value_y=500)
    medium = _kvp(tier="medium", value_y=10)
    low = _kvp(tier="Low", value_y=0)

    assert compare_key_value_pairs(high, medium) == -1
    assert compare_key_value_pairs(low, medium) == 1
    assert sort_key_value_pairs([low, medium, high]) == [high, medium, low]


def test_position_breaks_ties():
    top = _kvp(value_y=10, value_x=500)
    left = _kvp(value_y=20, value_x=0)
    same_row_left = _kvp(value_y=20, value_x=0, key_x=5)

    assert sort_key_value_pairs([same_row_left, left, top]) == [
        top,
        left,
        same_row_left,
    ]
    assert compare_key_value_pairs(left, _kvp(value_y=20, value_x=0)) == 0


def test_tier_is_ignored_when_one_side_has_none():
    untiered = _kvp(tier=None, value_y=0)
    high = _kvp(tier="High", value_y=100)
    assert compare_key_value_pairs(untiered, high) == -1


def test_count_for_key_class_trims_blanks():
    kvps = [_kvp("Total"), _kvp(" Total "), _kvp("Date")]
    assert count_for_key_class(kvps[0], kvps) == 2
    assert count_for_key_class(kvps[2], kvps) == 1


def test_field_name_numbering():
    page = FieldRecord(name="p")
    assert field_name(page, "Total", 2, "_ADP") == "Total_ADP_0"
    page.add_child("Total_ADP_0")
    assert field_name(page, "Total", 2, "_ADP") == "Total_ADP_1"

    assert field_name(page, "Date", 1, "_ADP") == "Date_ADP"
    page.add_child("Date_ADP")
    assert field_name(page, "Date", 1, "_ADP") == "Date"
    # A zero count names fields like a single occurrence
    assert field_name(page, "Vendor", 0, "") == "Vendor"


def test_field_name_gives_up_after_the_last_index():
    page = FieldRecord(name="p")
    for i in range(101):
        page.add_child(f"Total_{i}")
    assert field_name(page, "Total", 3, "") == "Total"


def test_set_field_uses_key_when_key_class_is_blank():
    page = FieldRecord(name="p")
    kvp = _kvp(key_class=" ", key="Due Date", tier="Low", value="soon")
    field = set_field(kvp, page, "", 1, "_X")
    assert field.name == "Due Date_X"
    assert field.type == "Due Date"
    assert field.text == "soon"
    assert field.get_variable("label") == "Due Date_X"
    assert field.get_variable("ADPKeyClassName") == " "


def test_set_field_updates_an_existing_field():
    page = FieldRecord(name="p")
    first = set_field(_kvp(value="1"), page, "", 1, "")
    second = set_field(_kvp(value="2"), page, "", 1, "")

    # "Total" is taken, so the bare base is reused
    assert second is first
    assert len(page.children) == 1
    assert first.text == "2"


def test_classification_variables():
    page = FieldRecord(name="p")
    add_classification(
        page,
        [
            DocumentClass(name="Invoice", class_match="95"),
            DocumentClass(name="Receipt", class_match="40"),
        ],
    )
    assert page.variables == {
        "ADPDocType": "Invoice",
        "ADPDocTypeConfidence": "95",
        "ADPDocType_0": "Invoice",
        "ADPDocType_0Confidence": "95",
        "ADPDocType_1": "Receipt",
        "ADPDocType_1Confidence": "40",
    }

    empty = FieldRecord(name="e")
    add_classification(empty, [])
    assert empty.variables == {}


def test_key_class_fields_stay_together():
    kvps = [
        _kvp("Total", "High", value_y=10),
        _kvp("Date", "High", value_y=20),
        _kvp("Total", "Low", value_y=5),
        _kvp("Date", "Medium", value_y=0),
        _kvp("Vendor", None, value_y=999),
    ]
    page = FieldRecord(name="p")

    emitted = add_normal_fields(page, kvps, "")
    assert [(kvp.key_class, kvp.tier) for kvp in emitted] == [
        ("Total", "high"),
        ("Total", "low"),
        ("Date", "high"),
        ("Date", "medium"),
    ]
    assert [child.name for child in page.children] == [
        "Total_0",
        "Total_1",
        "Date_0",
        "Date_1",
    ]


def test_sample_page_fields(sample_page):
    assert [child.name for child in sample_page.children] == [
        "InvoiceNumber_ADP_0",
        "InvoiceNumber_ADP_1",
        "LineItems_ADP",
        "Date_ADP",
        "LineItems",
    ]
    assert sample_page.get_variable("ADPDocType") == "Invoice"
    assert sample_page.get_variable("ADPDocType_1Confidence") == "40"

    best = sample_page.find_child("InvoiceNumber_ADP_0")
    assert best.type == "InvoiceNumber"
    assert best.text == "12345"
    assert best.status == 0
    assert best.variables["entityType"] == "ADP"
    assert best.variables["KeyMatch"] == "Invoice Number"
    assert best.variables["Position"] == "300,200,420,250"
    assert best.variables["KeyPosition"] == "100,200,250,250"
    assert best.variables["l"] == "300"
    assert best.variables["b"] == "250"
    assert best.variables["confidence"] == "100"
    assert best.variables["validityPercentage"] == "100"
    assert best.variables["subMatch1"] == "12345"
    assert best.variables["entityName"] == "InvoiceNumber_ADP_0"
    assert best.variables["ADPKeyClassConfidence"] == "High"
    assert best.variables["ADPSensitivity"] == "False"
    assert "ADPLineItemID" not in best.variables

    second = sample_page.find_child("InvoiceNumber_ADP_1")
    assert second.variables["confidence"] == "60"
    assert second.status == 1
    assert second.variables["ADPKeyClassConfidence"] == "Medium"

    date = sample_page.find_child("Date_ADP")
    assert date.type == "Date"
    assert date.variables["ADPSensitivity"] == "True"


def test_sample_table_fields(sample_page):
    table = sample_page.find_child("LineItems")
    assert table.type == "LineItems"
    assert table.text == "_TABLE_ZONE_"
    assert [child.name for child in table.children] == ["Lineitem_ADP0"]

    line_item = table.children[0]
    assert line_item.type == "Lineitem"
    assert line_item.variables["ADPLineItemID"] == "1"
    assert line_item.variables["ADPSeqLineItemID"] == "1"
    assert [child.name for child in line_item.children] == [
        "ItemName_ADP",
        "Quantity_ADP",
    ]
    quantity = line_item.find_child("Quantity_ADP")
    assert quantity.text == "5"
    assert quantity.variables["Position"] == "500,500,900,600"
    assert quantity.variables["KeyPosition"] == "500,400,900,500"
