"""Login identifier classification and normalization."""

import re
from enum import Enum

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# ASCII only; str.isdigit() and \d both accept non-ASCII digits.
MEDICAL_ID_PATTERN = re.compile(r"^[0-9]{7,}$")


class IdentifierKind(str, Enum):
    """What a raw login string looks like."""

    EMAIL = "email"
    MEDICAL_ID = "medical_id"


def is_email(value: str) -> bool:
    """Check whether a value has a local@domain.tld shape."""
    return bool(EMAIL_PATTERN.match(value.strip()))


def is_medical_id(value: str) -> bool:
    """Check whether a value is a registration number (7+ ASCII digits)."""
    return bool(MEDICAL_ID_PATTERN.match(value.strip()))


def classify_identifier(value: str) -> IdentifierKind:
    """
    Classify a raw login identifier.

    Strings that look like neither an email nor a medical ID are treated as
    email candidates, so the lookup fails with "not found" instead of a
    classification error.

    Args:
        value: Identifier as typed by the user

    Returns:
        The identifier kind
    """
    if is_email(value):
        return IdentifierKind.EMAIL
    if is_medical_id(value):
        return IdentifierKind.MEDICAL_ID
    return IdentifierKind.EMAIL


def normalize_email(value: str) -> str:
    """Normalize an email for storage and comparison."""
    return value.strip().lower()


def normalize_medical_id(value: str) -> str:
    """Normalize a medical ID; comparison stays case-sensitive."""
    return value.strip()
