from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..shifts.model import Shift
from ..shifts.resolver import ShiftResolver
from .calculator.base import HoursCapCalculator
from .calculator.standard_calculator import StandardCapCalculator
from .notes import ANTI_OVERBILLING_TAG, append_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Adjustment:
    attendance_id: int
    emp_code: str
    work_date: date
    original_hours: float
    capped_hours: float
    estimated_checkout: datetime
    reason: str

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "emp_code": self.emp_code,
            "work_date": self.work_date.isoformat(),
            "original_hours": self.original_hours,
            "capped_hours": self.capped_hours,
            "estimated_checkout": self.estimated_checkout.isoformat(),
            "reason": self.reason,
        }


@dataclass
class OverbillingSummary:
    processed_records: int = 0
    adjustments_made: int = 0
    potential_overbilling_hours: float = 0.0
    adjustments: list[Adjustment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "processed_records": self.processed_records,
            "adjustments_made": self.adjustments_made,
            "potential_overbilling_hours": round(self.potential_overbilling_hours, 2),
            "adjustments": [a.to_dict() for a in self.adjustments],
        }


class AntiOverbillingProcessor:
    """Caps billable hours of sessions with a missing or implausibly late punch-out.

    Open sessions are only capped once their expected end has passed, so a
    shift in progress is left alone until then.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: ShiftResolver,
        *,
        calculator: Optional[HoursCapCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._calculator = calculator or StandardCapCalculator()
        self._clock = clock

    def process(self, *, start: date, end: date, now: Optional[datetime] = None) -> OverbillingSummary:
        require_date_range(start, end)
        now = now or self._clock()
        summary = OverbillingSummary()

        for record in self._attendance.list_unadjusted(start=start, end=end):
            summary.processed_records += 1
            decision = self._calculator.decide(record, self._shift_for(record))
            if decision is None:
                continue
            if record.check_out is None and decision.estimated_checkout > now:
                continue

            original = self._original_hours(record, now)
            notes = append_note(record.notes, ANTI_OVERBILLING_TAG, decision.reason)
            saved = self._attendance.save_adjustment(
                attendance_id=record.attendance_id,
                adjusted_hours=decision.capped_hours,
                estimated_checkout=decision.estimated_checkout,
                adjustment_reason=decision.reason,
                notes=notes,
                adjusted_at=now,
            )
            if not saved:
                continue

            summary.adjustments_made += 1
            summary.potential_overbilling_hours += max(original - decision.capped_hours, 0.0)
            summary.adjustments.append(
                Adjustment(
                    attendance_id=record.attendance_id,
                    emp_code=record.emp_code,
                    work_date=record.work_date,
                    original_hours=original,
                    capped_hours=decision.capped_hours,
                    estimated_checkout=decision.estimated_checkout,
                    reason=decision.reason,
                )
            )
            logger.debug(
                "Capped %s on %s: %sh -> %sh (%s)",
                record.emp_code, record.work_date, original, decision.capped_hours, decision.reason,
            )

        logger.info(
            "Anti-overbilling %s..%s: processed=%s adjusted=%s prevented=%.2fh",
            start, end, summary.processed_records, summary.adjustments_made, summary.potential_overbilling_hours,
        )
        return summary

    def _shift_for(self, record: AttendanceRecord) -> Optional[Shift]:
        shift = self._resolver.resolve(record.emp_code, record.work_date)
        # The resolver's synthetic default has no id; treat it as "no shift".
        return shift if shift.shift_id is not None else None

    @staticmethod
    def _original_hours(record: AttendanceRecord, now: datetime) -> float:
        if record.check_out is not None:
            return round((record.check_out - record.check_in).total_seconds() / 3600, 2)
        return round(max((now - record.check_in).total_seconds(), 0) / 3600, 2)
