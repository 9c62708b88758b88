from __future__ import annotations

import logging
import time as _time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import (
    DUPLICATE_TAP_MINUTES,
    MAX_OVERTIME_HOURS,
    MAX_SESSION_HOURS,
    NORMALIZER_BATCH_SIZE,
)
from ..core.enums import AttendanceStatus, PunchState
from ..core.exceptions import ProcessingError
from ..employees.repository import EmployeeRepository
from ..shifts.model import Shift
from ..shifts.resolver import ShiftResolver
from ..staging.model import StagedPunch
from ..staging.repository import StagingRepository
from .model import AttendanceRecord, DailySession
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_BREAK_STATES = (PunchState.BREAK_OUT, PunchState.BREAK_IN)


@dataclass
class NormalizationResult:
    success: bool = True
    punches_read: int = 0
    groups: int = 0
    created: int = 0
    updated: int = 0
    duplicates_skipped: int = 0
    access_control: int = 0
    errors: list[str] = field(default_factory=list)
    processing_seconds: float = 0.0
    work_dates: set[date] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "punches_read": self.punches_read,
            "groups": self.groups,
            "created": self.created,
            "updated": self.updated,
            "duplicates_skipped": self.duplicates_skipped,
            "access_control": self.access_control,
            "errors": list(self.errors),
            "processing_seconds": round(self.processing_seconds, 3),
            "work_dates": sorted(d.isoformat() for d in self.work_dates),
        }


def build_session(
    punches: Sequence[StagedPunch],
    *,
    max_session_hours: int = MAX_SESSION_HOURS,
    duplicate_tap_minutes: int = DUPLICATE_TAP_MINUTES,
) -> DailySession:
    """Derive check-in/out from one employee's punches on one work date.

    The first IN punch is the check-in; the last OUT punch within
    max_session_hours is the check-out. Terminals that do not record a
    state fall back to first/last punch, ignoring repeat taps inside
    duplicate_tap_minutes.
    """

    ordered = sorted(punches, key=lambda p: (p.punch_time, p.staging_id))
    relevant = [p for p in ordered if p.state not in _BREAK_STATES]
    if not relevant:
        raise ProcessingError("No attendance punches (break punches only)")

    ins = [p for p in relevant if p.state is not None and p.state.is_in]
    outs = [p for p in relevant if p.state is not None and p.state.is_out]
    stateless = [p for p in relevant if p.state is None]

    if ins:
        check_in = ins[0].punch_time
    elif stateless:
        check_in = stateless[0].punch_time
    else:
        raise ProcessingError(f"No punch-in found ({len(outs)} punch-out only)")

    limit = check_in + timedelta(hours=max_session_hours)
    if outs:
        candidates = [p.punch_time for p in outs if check_in < p.punch_time <= limit]
    else:
        min_out = check_in + timedelta(minutes=duplicate_tap_minutes)
        candidates = [p.punch_time for p in stateless if min_out < p.punch_time <= limit]
    check_out: Optional[datetime] = candidates[-1] if candidates else None

    biotime_ids = [p.biotime_id for p in ordered if p.biotime_id is not None]
    last_biotime_id = max(biotime_ids) if biotime_ids else None

    if check_out is None:
        return DailySession(
            check_in=check_in,
            check_out=None,
            hours_worked=0.0,
            status=AttendanceStatus.INCOMPLETE,
            notes=f"INCOMPLETE SESSION: {len(ordered)} punches, {len(ins)} in, {len(outs)} out, no valid punch-out",
            punch_count=len(ordered),
            last_biotime_id=last_biotime_id,
        )

    hours = min((check_out - check_in).total_seconds() / 3600, float(max_session_hours))
    return DailySession(
        check_in=check_in,
        check_out=check_out,
        hours_worked=round(hours, 2),
        status=AttendanceStatus.COMPLETE,
        notes=f"Processed {len(ordered)} punches: {len(ins)} in, {len(outs)} out",
        punch_count=len(ordered),
        last_biotime_id=last_biotime_id,
    )


class AttendanceNormalizer:
    """Turns staged punches into one attendance row per (emp_code, work_date)."""

    def __init__(
        self,
        staging: StagingRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        resolver: ShiftResolver,
        *,
        batch_size: int = NORMALIZER_BATCH_SIZE,
        max_session_hours: int = MAX_SESSION_HOURS,
        max_overtime_hours: int = MAX_OVERTIME_HOURS,
        duplicate_tap_minutes: int = DUPLICATE_TAP_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._staging = staging
        self._attendance = attendance
        self._employees = employees
        self._resolver = resolver
        self._batch_size = int(batch_size)
        self._max_session_hours = int(max_session_hours)
        self._max_overtime = timedelta(hours=int(max_overtime_hours))
        self._duplicate_tap_minutes = int(duplicate_tap_minutes)
        self._clock = clock
        self._shift_cache: dict[tuple[str, date], Shift] = {}

    def process(self, *, now: Optional[datetime] = None) -> NormalizationResult:
        started = _time.monotonic()
        now = now or self._clock()
        self._shift_cache = {}
        result = NormalizationResult()

        batch = self._staging.list_unprocessed(self._batch_size)
        result.punches_read = len(batch)

        access = [p.staging_id for p in batch if p.is_access_control]
        if access:
            self._staging.mark_processed(access, processed_at=now)
            result.access_control = len(access)

        groups: dict[tuple[str, date], list[StagedPunch]] = defaultdict(list)
        for punch in batch:
            if not punch.is_access_control:
                groups[(punch.emp_code, self.work_date_for(punch))].append(punch)
        result.groups = len(groups)

        for (emp_code, work_date), punches in sorted(groups.items()):
            ids = [p.staging_id for p in punches]
            try:
                outcome = self._reconcile(emp_code, work_date)
            except ProcessingError as exc:
                message = f"{emp_code} on {work_date.isoformat()}: {exc}"
                logger.warning("Normalizer skipped %s", message)
                result.errors.append(message)
                self._staging.mark_processed(ids, processed_at=now, error=str(exc)[:255])
                continue

            if outcome == "created":
                result.created += 1
            elif outcome == "updated":
                result.updated += 1
            else:
                result.duplicates_skipped += 1
            if outcome != "skipped":
                result.work_dates.add(work_date)
            self._staging.mark_processed(ids, processed_at=now)

        result.success = not result.errors
        result.processing_seconds = _time.monotonic() - started
        logger.info(
            "Normalized %s punches into %s groups: created=%s updated=%s skipped=%s access_control=%s errors=%s",
            result.punches_read, result.groups, result.created, result.updated,
            result.duplicates_skipped, result.access_control, len(result.errors),
        )
        return result

    def work_date_for(self, punch: StagedPunch) -> date:
        """Calendar date of the punch, except a punch-out that closes last night's overnight shift."""
        day = punch.punch_time.date()
        state = punch.state
        if state is None or not state.is_out:
            return day

        previous = day - timedelta(days=1)
        shift = self._shift_for(punch.emp_code, previous)
        if shift.is_overnight:
            _, shift_end = shift.window_for(previous)
            if punch.punch_time <= shift_end + self._max_overtime:
                return previous
        return day

    def _shift_for(self, emp_code: str, work_date: date) -> Shift:
        key = (emp_code, work_date)
        if key not in self._shift_cache:
            self._shift_cache[key] = self._resolver.resolve(emp_code, work_date)
        return self._shift_cache[key]

    def _punches_for_day(self, emp_code: str, work_date: date) -> list[StagedPunch]:
        # Next-morning punch-outs of an overnight shift belong to work_date too.
        start = datetime.combine(work_date, time.min)
        candidates = self._staging.list_for_employee_between(
            emp_code=emp_code, start=start, end=start + timedelta(days=2)
        )
        return [p for p in candidates if not p.is_access_control and self.work_date_for(p) == work_date]

    def _reconcile(self, emp_code: str, work_date: date) -> str:
        if not self._employees.get_by_code(emp_code):
            raise ProcessingError(f"Employee not found for code: {emp_code}")

        punches = self._punches_for_day(emp_code, work_date)
        session = build_session(
            punches,
            max_session_hours=self._max_session_hours,
            duplicate_tap_minutes=self._duplicate_tap_minutes,
        )

        existing = self._attendance.get_for_employee_and_date(emp_code, work_date)
        if existing is None:
            self._attendance.upsert_session(emp_code=emp_code, work_date=work_date, session=session)
            return "created"

        if not self._should_replace(existing, session):
            return "skipped"

        self._attendance.upsert_session(emp_code=emp_code, work_date=work_date, session=session)
        return "updated"

    @staticmethod
    def _should_replace(existing: AttendanceRecord, session: DailySession) -> bool:
        if session.same_as(existing):
            return False
        if existing.status == AttendanceStatus.AUTO_PUNCHOUT:
            # Only real punch data may override a system punch-out.
            return session.check_out is not None
        return True
