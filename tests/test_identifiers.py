"""Tests for login identifier classification."""

import pytest

from app.core.identifiers import (
    IdentifierKind,
    classify_identifier,
    is_email,
    is_medical_id,
    normalize_email,
    normalize_medical_id,
)


@pytest.mark.parametrize(
    "value",
    ["ana@example.com", "  Ana.Perez@Example.CO  ", "a+tag@sub.domain.org"],
)
def test_email_shapes(value):
    """Standard local@domain.tld strings are emails."""
    assert is_email(value)
    assert classify_identifier(value) is IdentifierKind.EMAIL


@pytest.mark.parametrize("value", ["1234567", " 98765432101 ", "0000000"])
def test_medical_id_shapes(value):
    """Seven or more digits after trimming are medical IDs."""
    assert is_medical_id(value)
    assert classify_identifier(value) is IdentifierKind.MEDICAL_ID


@pytest.mark.parametrize("value", ["123456", "12345a7", "123 4567", "١٢٣٤٥٦٧٨"])
def test_not_medical_ids(value):
    """Short strings, mixed strings and non-ASCII digits are not medical IDs."""
    assert not is_medical_id(value)


@pytest.mark.parametrize("value", ["jdoe", "no-at-sign.com", "a@b", "", "12345"])
def test_unrecognized_falls_back_to_email(value):
    """Anything else is passed through as an email candidate."""
    assert classify_identifier(value) is IdentifierKind.EMAIL


def test_normalization():
    """Emails are trimmed and lowercased; medical IDs are only trimmed."""
    assert normalize_email("  Foo@X.com ") == "foo@x.com"
    assert normalize_medical_id(" AB1234567 ") == "AB1234567"
