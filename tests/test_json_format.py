"""Tests for JSON import/export."""

import json

import pytest

from kontak.domain import Contact
from kontak.errors import ContactFormatError
from kontak.formats import draft_from_mapping, export_json, parse_json


def test_export_projects_name_phone_ewallet_with_indent():
    out = export_json([Contact(name="Budi", phone="0812", ewallet=("dana",), notes="x")])
    assert json.loads(out) == [{"name": "Budi", "phone": "0812", "ewallet": ["dana"]}]
    assert '\n  {\n    "name": "Budi"' in out


def test_export_keeps_non_ascii():
    assert "Zoë" in export_json([Contact(name="Zoë")])


def test_roundtrip_is_lossless():
    contacts = [
        Contact(name="Budi", phone="0812", ewallet=("dana", "ovo")),
        Contact(name="Sari"),
    ]
    drafts = parse_json(export_json(contacts))
    assert [(d.name, d.phone, d.ewallet) for d in drafts] == [
        ("Budi", "0812", ["dana", "ovo"]),
        ("Sari", None, []),
    ]


def test_non_list_root_is_format_error():
    with pytest.raises(ContactFormatError):
        parse_json('{"name": "Budi"}')


def test_malformed_json_is_format_error():
    with pytest.raises(ContactFormatError):
        parse_json("[{")


def test_mapping_defaults():
    draft = draft_from_mapping({"ewallet": "dana"})
    assert draft.name == ""
    assert draft.phone is None
    assert draft.ewallet == []


def test_mapping_stringifies_numbers_and_ignores_non_objects():
    assert draft_from_mapping({"name": "A", "phone": 812}).phone == "812"
    assert draft_from_mapping("oops").name == ""
    assert draft_from_mapping({"name": "A", "phone": ""}).phone is None
