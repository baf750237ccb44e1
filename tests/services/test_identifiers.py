"""
Tests for human-readable identifier formatting.
"""

from datetime import datetime

import pytest

from itam.services.identifiers import (
    current_year,
    employee_id,
    fingerprint_doc_number,
    fingerprint_series_key,
    format_id,
)


@pytest.mark.parametrize("prefix, seq, width, expected", [
    ("EMP", 7, 6, "EMP000007"),
    ("FP-2025-", 12, 5, "FP-2025-00012"),
    ("EMP", 123456, 6, "EMP123456"),
    ("EMP", 1234567, 6, "EMP1234567"),
    ("", 0, 3, "000"),
    ("X", 5, 0, "X5"),
])
def test_format_id(prefix, seq, width, expected):
    assert format_id(prefix, seq, width) == expected


def test_negative_sequence_rejected():
    with pytest.raises(ValueError):
        format_id("EMP", -1, 6)


def test_employee_id_defaults():
    assert employee_id(123) == "EMP000123"


def test_fingerprint_doc_number():
    assert fingerprint_doc_number(2025, 7) == "FP-2025-00007"


def test_fingerprint_series_is_per_year():
    assert fingerprint_series_key(2025) == "fp-docs-2025"
    assert fingerprint_series_key(2025) != fingerprint_series_key(2026)


def test_current_year_uses_given_time():
    assert current_year(datetime(2024, 12, 31, 23, 59)) == 2024
