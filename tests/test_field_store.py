import json

import pytest

from adp_layout.datamodels.types import ConfidenceAction
from adp_layout.fields.field_store import (
    FieldRecord,
    fields_file_name,
    remove_unneeded_fields,
)


def _page() -> FieldRecord:
    page = FieldRecord(name="page_0", type="Page")
    for name, tier in [
        ("Total", "High"),
        ("Date", "medium"),
        ("Vendor", " Low "),
        ("Unrated", None),
    ]:
        field = page.add_child(name)
        field.set_variable("entityType", "ADP")
        if tier is not None:
            field.set_variable("ADPKeyClassConfidence", tier)
    manual = page.add_child("Manual")
    manual.set_variable("ADPKeyClassConfidence", "Low")
    return page


def _names(page: FieldRecord):
    return [child.name for child in page.children]


def test_add_child_creates_or_finds():
    page = FieldRecord(name="p")
    first = page.add_child("A")
    assert page.add_child("A") is first
    assert page.has_child("A")
    assert not page.has_child("B")
    assert page.find_child("B") is None


def test_delete_child_matches_identity():
    page = FieldRecord(name="p")
    page.add_child("A")
    lookalike = FieldRecord(name="A")

    page.delete_child(lookalike)
    assert _names(page) == ["A"]
    page.delete_child(page.children[0])
    assert _names(page) == []


@pytest.mark.parametrize(
    "action,remaining,deleted",
    [
        (ConfidenceAction.KEEP_ALL, ["Total", "Date", "Vendor", "Unrated", "Manual"], 0),
        (ConfidenceAction.KEEP_HIGH, ["Total", "Unrated", "Manual"], 2),
        (ConfidenceAction.KEEP_MEDIUM, ["Total", "Date", "Unrated", "Manual"], 1),
        (ConfidenceAction.DELETE_ALL, ["Manual"], 4),
    ],
)
def test_remove_unneeded_fields(action, remaining, deleted):
    page = _page()
    assert remove_unneeded_fields(page, action) == deleted
    assert _names(page) == remaining


def test_confidence_action_parse():
    assert ConfidenceAction.parse("KeepHigh") == ConfidenceAction.KEEP_HIGH
    assert ConfidenceAction.parse(" deleteall ") == ConfidenceAction.DELETE_ALL
    assert ConfidenceAction.parse("nope") == ConfidenceAction.KEEP_ALL
    assert ConfidenceAction.parse(None) == ConfidenceAction.KEEP_ALL


def test_save_as_json(tmp_path):
    page = FieldRecord(name="page_0", type="Page")
    page.set_variable("layout", "page_0_layout.xml")
    child = page.add_child("Total_ADP")
    child.text = "12,50 €"
    child.status = 1

    path = tmp_path / fields_file_name("page_0")
    page.save_as_json(path)

    assert path.name == "page_0_fields.json"
    with open(path, "r", encoding="utf-8") as fr:
        saved = json.load(fr)
    assert saved["name"] == "page_0"
    assert saved["variables"] == {"layout": "page_0_layout.xml"}
    assert saved["children"][0]["text"] == "12,50 €"
    assert saved["children"][0]["status"] == 1
    assert FieldRecord.model_validate(saved) == page
