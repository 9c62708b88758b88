from __future__ import annotations

import re
from datetime import date

from ..core.exceptions import ValidationError

_CNIC_DIGITS = 13


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive(value: int, field_name: str) -> int:
    if value is None or int(value) <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return int(value)


def require_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError(f"Invalid range: {start.isoformat()} is after {end.isoformat()}")


def normalize_cnic(value: str) -> str:
    """Return the 13 CNIC digits, dropping dashes and spaces."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != _CNIC_DIGITS:
        raise ValidationError(f"CNIC must have {_CNIC_DIGITS} digits: {value!r}")
    return digits
