"""Tests for parsing the vision model's answer."""
from app.verification import extract_json_object, parse_amount, parse_verification


def test_bare_json():
    record = parse_verification('{"amount": 150, "verified": true, "reference": "ABC"}')
    assert record.amount == 150
    assert record.verified is True
    assert record.reference == "ABC"


def test_fenced_json_with_prose():
    raw = 'Here is the result:\n```json\n{"amount": "1,500.00", "verified": false}\n```\nThanks.'
    record = parse_verification(raw)
    assert record.amount == 1500.0
    assert record.verified is False


def test_prose_around_object():
    assert extract_json_object('Result: {"a": 1} done') == {"a": 1}


def test_no_object():
    assert extract_json_object("I cannot read this image.") is None
    assert parse_verification("I cannot read this image.") is None


def test_empty_and_none():
    assert extract_json_object("") is None
    assert parse_verification(None) is None


def test_broken_json():
    assert parse_verification('{"amount": 150, "verified": tru') is None


def test_array_is_not_a_record():
    assert extract_json_object("[1, 2, 3]") is None


def test_null_strings_become_none():
    record = parse_verification('{"amount": null, "timestamp": "null", "reference": "None"}')
    assert record.amount is None
    assert record.timestamp is None
    assert record.reference is None


def test_missing_flags_default_false():
    record = parse_verification('{"amount": 150}')
    assert record.verified is False
    assert record.amount_match is False


def test_extra_keys_kept_in_payload():
    record = parse_verification('{"amount": 150, "verified": true, "bank": "KBank"}')
    assert record.as_payload()["bank"] == "KBank"


def test_parse_amount():
    assert parse_amount("150 บาท") == 150.0
    assert parse_amount("฿ 1,234.50") == 1234.5
    assert parse_amount(99) == 99.0
    assert parse_amount(True) is None
    assert parse_amount("not_found") is None
    assert parse_amount("no digits") is None


def test_payload_is_model_json_verbatim():
    record = parse_verification('{"amount": "1,500.00", "timestamp": "null", "verified": true}')
    assert record.amount == 1500.0
    assert record.timestamp is None
    assert record.as_payload() == {"amount": "1,500.00", "timestamp": "null", "verified": True}
