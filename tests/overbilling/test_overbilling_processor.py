from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.nexlinx_ems.nexlinx_ems.core.exceptions import ValidationError
from src.nexlinx_ems.nexlinx_ems.employees.model import Employee
from src.nexlinx_ems.nexlinx_ems.overbilling.service import AntiOverbillingProcessor
from src.nexlinx_ems.nexlinx_ems.shifts.model import Shift
from src.nexlinx_ems.nexlinx_ems.shifts.resolver import ShiftResolver
from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemoryShifts

DAY = Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0))


def _processor(attendance):
    employees = InMemoryEmployees.of(Employee(1, "1001", "Ali", shift_id=1), Employee(2, "3001", "No Shift"))
    return AntiOverbillingProcessor(attendance, ShiftResolver(InMemoryShifts({1: DAY}), employees))


def test_caps_missing_and_late_punch_outs(fixed_now):
    attendance = InMemoryAttendance()
    open_yesterday = attendance.add(
        emp_code="1001",
        work_date=date(2025, 3, 9),
        check_in=datetime(2025, 3, 9, 9, 0),
        notes="INCOMPLETE SESSION: 1 punches, 1 in, 0 out, no valid punch-out",
    )
    open_today = attendance.add(emp_code="1001", work_date=date(2025, 3, 10), check_in=datetime(2025, 3, 10, 9, 0))
    overtime = attendance.add(
        emp_code="3001",
        work_date=date(2025, 3, 9),
        check_in=datetime(2025, 3, 9, 8, 0),
        check_out=datetime(2025, 3, 9, 19, 30),
        hours_worked=11.5,
    )
    attendance.add(
        emp_code="1001",
        work_date=date(2025, 3, 8),
        check_in=datetime(2025, 3, 8, 9, 0),
        check_out=datetime(2025, 3, 8, 17, 0),
        hours_worked=8.0,
    )

    summary = _processor(attendance).process(start=date(2025, 3, 8), end=date(2025, 3, 10), now=fixed_now)

    assert summary.processed_records == 4
    assert summary.adjustments_made == 2
    # 27h open session billed as 8h, and 11.5h cut back to 11h
    assert summary.potential_overbilling_hours == pytest.approx(19.5)

    capped = attendance.rows[open_yesterday.attendance_id]
    assert capped.adjusted_hours == 8.0
    assert capped.payable_hours == 8.0
    assert capped.estimated_checkout == datetime(2025, 3, 9, 17, 0)
    assert capped.adjustment_reason == "No punch-out: arrival to shift end (Day: 8h)"
    assert capped.notes == (
        "INCOMPLETE SESSION: 1 punches, 1 in, 0 out, no valid punch-out"
        " | ANTI-OVERBILLING: No punch-out: arrival to shift end (Day: 8h)"
    )

    assert attendance.rows[open_today.attendance_id].adjusted_at is None

    no_shift = attendance.rows[overtime.attendance_id]
    assert no_shift.adjusted_hours == 11.0
    assert no_shift.adjustment_reason == "Capped at shift end + 3h overtime"


def test_adjusted_rows_are_not_processed_twice(fixed_now):
    attendance = InMemoryAttendance()
    attendance.add(emp_code="1001", work_date=date(2025, 3, 9), check_in=datetime(2025, 3, 9, 9, 0))
    processor = _processor(attendance)

    assert processor.process(start=date(2025, 3, 9), end=date(2025, 3, 9), now=fixed_now).adjustments_made == 1
    again = processor.process(start=date(2025, 3, 9), end=date(2025, 3, 9), now=fixed_now)
    assert (again.processed_records, again.adjustments_made) == (0, 0)


def test_inverted_range_is_rejected(fixed_now):
    with pytest.raises(ValidationError):
        _processor(InMemoryAttendance()).process(start=date(2025, 3, 10), end=date(2025, 3, 9), now=fixed_now)
