from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """A dated shift assignment that overrides the employee's default shift."""

    schedule_id: int
    emp_code: str
    work_date: date
    shift_id: int
    note: Optional[str] = None
