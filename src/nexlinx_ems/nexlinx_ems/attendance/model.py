from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ArrivalStatus, AttendanceStatus, DepartureStatus, LatenessTier


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the canonical attendance row for (emp_code, work_date)."""

    attendance_id: int
    emp_code: str
    work_date: date
    check_in: datetime
    check_out: Optional[datetime]
    hours_worked: float
    status: AttendanceStatus
    notes: Optional[str] = None
    punch_count: int = 0
    last_biotime_id: Optional[int] = None

    # timing classification
    shift_id: Optional[int] = None
    arrival_status: Optional[ArrivalStatus] = None
    departure_status: Optional[DepartureStatus] = None
    early_minutes: int = 0
    late_minutes: int = 0
    grace_minutes_used: int = 0
    early_departure_minutes: int = 0
    late_departure_minutes: int = 0
    deduction_minutes: int = 0
    lateness_tier: Optional[LatenessTier] = None
    expected_arrival: Optional[datetime] = None
    expected_departure: Optional[datetime] = None
    timing_processed_at: Optional[datetime] = None

    # anti-overbilling
    adjusted_hours: Optional[float] = None
    estimated_checkout: Optional[datetime] = None
    adjustment_reason: Optional[str] = None
    adjusted_at: Optional[datetime] = None

    @property
    def payable_hours(self) -> float:
        return self.adjusted_hours if self.adjusted_hours is not None else self.hours_worked


@dataclass(frozen=True)
class DailySession:
    """Check-in/out derived from one employee's punches on one work date."""

    check_in: datetime
    check_out: Optional[datetime]
    hours_worked: float
    status: AttendanceStatus
    notes: str
    punch_count: int
    last_biotime_id: Optional[int] = None

    def same_as(self, record: AttendanceRecord) -> bool:
        return (
            self.check_in == record.check_in
            and self.check_out == record.check_out
            and self.punch_count == record.punch_count
        )


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports (attendance joined with employee and shift)."""

    emp_code: str
    full_name: str
    department: Optional[str]
    shift_name: Optional[str]
    break_minutes: int
    work_date: date
    check_in: datetime
    check_out: Optional[datetime]
    hours_worked: float
    adjusted_hours: Optional[float]
    status: AttendanceStatus
    arrival_status: Optional[ArrivalStatus] = None
    deduction_minutes: int = 0
    notes: Optional[str] = None
