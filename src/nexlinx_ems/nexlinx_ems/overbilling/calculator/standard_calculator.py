from __future__ import annotations

from datetime import timedelta
from typing import Optional

from .base import CapDecision, HoursCapCalculator
from ...attendance.model import AttendanceRecord
from ...core.constants import MAX_OVERTIME_HOURS, MAX_WORKING_HOURS, STANDARD_DAY_HOURS
from ...shifts.model import Shift


def _hours_label(hours: float) -> str:
    return f"{hours:g}h"


class StandardCapCalculator(HoursCapCalculator):
    """Standard rule.

    The expected end of a session is check-in plus the shift length (8h
    without a shift). A missing punch-out is billed up to that point; a
    punch-out more than max_overtime_hours after it is cut back to it.
    """

    def __init__(
        self,
        *,
        standard_hours: int = STANDARD_DAY_HOURS,
        max_overtime_hours: int = MAX_OVERTIME_HOURS,
        max_working_hours: int = MAX_WORKING_HOURS,
    ):
        self._standard_hours = int(standard_hours)
        self._max_overtime_hours = int(max_overtime_hours)
        self._max_working_hours = int(max_working_hours)

    def shift_hours(self, shift: Optional[Shift]) -> float:
        if shift is None:
            return float(self._standard_hours)
        return min(round(shift.duration_minutes / 60, 2), float(self._max_working_hours))

    def decide(self, record: AttendanceRecord, shift: Optional[Shift]) -> Optional[CapDecision]:
        hours = self.shift_hours(shift)
        expected_end = record.check_in + timedelta(hours=hours)

        if record.check_out is None:
            if shift is not None:
                reason = f"No punch-out: arrival to shift end ({shift.shift_name}: {_hours_label(hours)})"
            else:
                reason = f"No punch-out: standard {self._standard_hours}h limit applied"
            return CapDecision(capped_hours=hours, estimated_checkout=expected_end, reason=reason)

        max_checkout = expected_end + timedelta(hours=self._max_overtime_hours)
        if record.check_out <= max_checkout:
            return None

        capped = round((max_checkout - record.check_in).total_seconds() / 3600, 2)
        return CapDecision(
            capped_hours=capped,
            estimated_checkout=max_checkout,
            reason=f"Capped at shift end + {self._max_overtime_hours}h overtime",
        )
