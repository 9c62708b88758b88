from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as known to both EMS and BioTime.

    emp_code is the BioTime employee code and the join key for punches.
    non_bio marks staff who are exempt from biometric punching.
    """

    employee_id: int
    emp_code: str
    full_name: str
    department: Optional[str] = None
    cnic: Optional[str] = None
    shift_id: Optional[int] = None
    is_active: bool = True
    non_bio: bool = False


@dataclass(frozen=True)
class CnicConflict:
    cnic: str
    emp_codes: tuple[str, ...]
