from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...attendance.model import AttendanceRecord
from ...shifts.model import Shift


@dataclass(frozen=True)
class CapDecision:
    capped_hours: float
    estimated_checkout: datetime
    reason: str


class HoursCapCalculator(ABC):
    """Calculator interface (Strategy Pattern for billable-hour caps)."""

    @abstractmethod
    def decide(self, record: AttendanceRecord, shift: Optional[Shift]) -> Optional[CapDecision]:
        """Return the cap to apply, or None when the record is billable as is.

        shift is None when the employee has no shift on record.
        """

        raise NotImplementedError
