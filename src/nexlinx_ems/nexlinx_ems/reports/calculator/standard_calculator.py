from __future__ import annotations

from .base import PayableHoursCalculator
from ...attendance.model import AttendanceReportRow
from ...core.constants import MAX_SESSION_HOURS


class StandardPayableCalculator(PayableHoursCalculator):
    """Standard rule: capped hours when present, else (out - in) - break_minutes, not below 0."""

    def __init__(self, *, max_session_hours: int = MAX_SESSION_HOURS):
        self._max_minutes = int(max_session_hours) * 60

    def payable_minutes(self, row: AttendanceReportRow) -> int:
        if row.adjusted_hours is not None:
            return max(int(round(row.adjusted_hours * 60)), 0)
        if not row.check_out:
            return 0
        minutes = min(int((row.check_out - row.check_in).total_seconds() // 60), self._max_minutes)
        minutes -= int(row.break_minutes or 0)
        return max(minutes, 0)
