from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import minutes_between, now_local
from ..core.constants import AUTO_PUNCHOUT_THRESHOLD_HOURS, MAX_SESSION_HOURS, MISSED_PUNCH_PENALTY_HOURS
from ..shifts.resolver import ShiftResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoPunchout:
    attendance_id: int
    emp_code: str
    check_out: datetime
    late_minutes: int
    available_hours: float
    payroll_hours: float
    summary: str

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "emp_code": self.emp_code,
            "check_out": self.check_out.isoformat(),
            "late_minutes": self.late_minutes,
            "available_hours": self.available_hours,
            "payroll_hours": self.payroll_hours,
            "summary": self.summary,
        }


@dataclass
class AutoPunchoutResult:
    scanned: int = 0
    closed: int = 0
    punchouts: list[AutoPunchout] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "closed": self.closed,
            "punchouts": [p.to_dict() for p in self.punchouts],
        }


class AutoPunchoutService:
    """Closes sessions left open past the threshold with a system punch-out.

    Payroll hours: shift length minus late arrival, at most the maximum
    session, minus the missed-punch penalty.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: ShiftResolver,
        *,
        threshold_hours: int = AUTO_PUNCHOUT_THRESHOLD_HOURS,
        max_session_hours: int = MAX_SESSION_HOURS,
        penalty_hours: int = MISSED_PUNCH_PENALTY_HOURS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._threshold = timedelta(hours=int(threshold_hours))
        self._max_session_hours = float(max_session_hours)
        self._penalty_hours = float(penalty_hours)
        self._clock = clock

    def calculate(self, record: AttendanceRecord) -> AutoPunchout:
        shift = self._resolver.resolve(record.emp_code, record.work_date)
        shift_start, _ = shift.window_for(record.work_date)

        check_out = record.check_in + self._threshold
        late_minutes = max(minutes_between(shift_start, record.check_in), 0)
        available = max(shift.duration_minutes - late_minutes, 0) / 60
        payroll = max(min(available, self._max_session_hours) - self._penalty_hours, 0.0)
        payroll = round(payroll, 2)

        summary = (
            f"Auto punch-out at {check_out:%H:%M:%S} | Late: {late_minutes}m"
            f" | Available: {available:.1f}h | Penalty: {self._penalty_hours:.1f}h | Final: {payroll:.1f}h"
        )
        return AutoPunchout(
            attendance_id=record.attendance_id,
            emp_code=record.emp_code,
            check_out=check_out,
            late_minutes=late_minutes,
            available_hours=round(available, 2),
            payroll_hours=payroll,
            summary=summary,
        )

    def run(self, *, now: Optional[datetime] = None) -> AutoPunchoutResult:
        now = now or self._clock()
        result = AutoPunchoutResult()

        for record in self._attendance.list_open_before(now - self._threshold):
            result.scanned += 1
            punchout = self.calculate(record)
            notes = f"{record.notes} | {punchout.summary}" if record.notes else punchout.summary
            closed = self._attendance.apply_auto_punchout(
                attendance_id=record.attendance_id,
                check_out=punchout.check_out,
                adjusted_hours=punchout.payroll_hours,
                notes=notes,
                adjusted_at=now,
            )
            if closed:
                result.closed += 1
                result.punchouts.append(punchout)
                logger.info("Auto punch-out %s on %s: %s", record.emp_code, record.work_date, punchout.summary)

        logger.info("Auto punch-out scan: scanned=%s closed=%s", result.scanned, result.closed)
        return result
