from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..timing.model import TimingResult
from .model import AttendanceRecord, AttendanceReportRow, DailySession


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, emp_code: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_session(self, *, emp_code: str, work_date: date, session: DailySession) -> int:
        """Insert or replace the punch-derived part of the row keyed by (emp_code, work_date).

        Replacing clears timing and adjustment fields so later steps redo them.
        Returns attendance_id.
        """

        raise NotImplementedError

    def list_range(self, *, start: date, end: date, emp_code: Optional[str] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_classification(
        self,
        *,
        start: date,
        end: date,
        after_id: int,
        limit: int,
        include_processed: bool = False,
    ) -> Sequence[AttendanceRecord]:
        """Rows ordered by attendance_id, starting after after_id."""

        raise NotImplementedError

    def save_timing(self, *, attendance_id: int, timing: TimingResult, processed_at: datetime) -> bool:
        raise NotImplementedError

    def list_unadjusted(self, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def save_adjustment(
        self,
        *,
        attendance_id: int,
        adjusted_hours: float,
        estimated_checkout: Optional[datetime],
        adjustment_reason: str,
        notes: str,
        adjusted_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def list_open_before(self, cutoff: datetime) -> Sequence[AttendanceRecord]:
        """Rows without check_out whose check_in is at or before cutoff."""

        raise NotImplementedError

    def apply_auto_punchout(
        self,
        *,
        attendance_id: int,
        check_out: datetime,
        adjusted_hours: float,
        notes: str,
        adjusted_at: datetime,
        status: AttendanceStatus = AttendanceStatus.AUTO_PUNCHOUT,
    ) -> bool:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        emp_code: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
