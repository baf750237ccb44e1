"""
Human-readable identifier formatting.

Pure functions only. The numbers come from SequenceService;
this module just renders them.
"""

from datetime import datetime

EMPLOYEE_SERIES = "employees"
EMPLOYEE_PREFIX = "EMP"
EMPLOYEE_WIDTH = 6
FP_DOC_WIDTH = 5


def format_id(prefix: str, sequence: int, width: int) -> str:
    """
    Zero-pad sequence to width digits and prepend prefix.

    Numbers wider than width are kept whole, never truncated:
    format_id("EMP", 1234567, 6) == "EMP1234567".
    """
    if sequence < 0:
        raise ValueError(f"sequence must be non-negative, got {sequence}")
    if width < 0:
        raise ValueError(f"width must be non-negative, got {width}")
    return f"{prefix}{sequence:0{width}d}"


def employee_id(sequence: int, prefix: str = EMPLOYEE_PREFIX,
                width: int = EMPLOYEE_WIDTH) -> str:
    return format_id(prefix, sequence, width)


def fingerprint_doc_prefix(year: int) -> str:
    return f"FP-{year}-"


def fingerprint_series_key(year: int) -> str:
    """Document numbers restart every calendar year, so the counter is per year."""
    return f"fp-docs-{year}"


def fingerprint_doc_number(year: int, sequence: int, width: int = FP_DOC_WIDTH) -> str:
    return format_id(fingerprint_doc_prefix(year), sequence, width)


def current_year(now: datetime | None = None) -> int:
    return (now or datetime.utcnow()).year
