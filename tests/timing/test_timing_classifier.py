from __future__ import annotations

from datetime import date, datetime, time

from src.nexlinx_ems.nexlinx_ems.core.enums import ArrivalStatus, DepartureStatus, LatenessTier
from src.nexlinx_ems.nexlinx_ems.employees.model import Employee
from src.nexlinx_ems.nexlinx_ems.shifts.model import Shift
from src.nexlinx_ems.nexlinx_ems.shifts.resolver import ShiftResolver
from src.nexlinx_ems.nexlinx_ems.timing.service import TimingClassifier
from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemoryShifts

DAY = Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0), grace_minutes=30)
NIGHT = Shift(shift_id=2, shift_name="Night", start_time=time(21, 0), end_time=time(5, 0), grace_minutes=30)
WORK_DATE = date(2025, 3, 10)


def _classifier(attendance, **kwargs):
    employees = InMemoryEmployees.of(
        Employee(1, "1001", "Ali", shift_id=1),
        Employee(2, "2001", "Guard", shift_id=2),
        Employee(3, "3001", "No Shift"),
    )
    resolver = ShiftResolver(InMemoryShifts({1: DAY, 2: NIGHT}), employees)
    return TimingClassifier(attendance, resolver, **kwargs)


def _record(attendance, emp_code, check_in, check_out=None, work_date=WORK_DATE):
    return attendance.add(emp_code=emp_code, work_date=work_date, check_in=check_in, check_out=check_out)


def test_late_arrival_and_early_departure_are_both_deducted():
    attendance = InMemoryAttendance()
    rec = _record(attendance, "1001", datetime(2025, 3, 10, 10, 15), datetime(2025, 3, 10, 16, 40))

    timing = _classifier(attendance).classify_record(rec, DAY)

    assert timing.arrival_status == ArrivalStatus.LATE
    assert timing.late_minutes == 75
    assert timing.lateness_tier == LatenessTier.SIGNIFICANT
    assert timing.departure_status == DepartureStatus.EARLY
    assert timing.early_departure_minutes == 20
    assert timing.deduction_minutes == 95
    assert timing.expected_arrival == datetime(2025, 3, 10, 9, 0)
    assert timing.expected_departure == datetime(2025, 3, 10, 17, 0)


def test_grace_costs_nothing():
    attendance = InMemoryAttendance()
    rec = _record(attendance, "1001", datetime(2025, 3, 10, 9, 25), datetime(2025, 3, 10, 17, 10))

    timing = _classifier(attendance).classify_record(rec, DAY)

    assert timing.arrival_status == ArrivalStatus.GRACE
    assert timing.grace_minutes_used == 25
    assert timing.departure_status == DepartureStatus.ON_TIME
    assert timing.deduction_minutes == 0
    assert timing.lateness_tier == LatenessTier.NONE


def test_lateness_tiers():
    attendance = InMemoryAttendance()
    classifier = _classifier(attendance)

    def tier(check_in):
        return classifier.classify_record(_record(attendance, "1001", check_in), DAY).lateness_tier

    assert tier(datetime(2025, 3, 10, 9, 31)) == LatenessTier.MINOR
    assert tier(datetime(2025, 3, 10, 10, 0)) == LatenessTier.MINOR
    assert tier(datetime(2025, 3, 10, 11, 0)) == LatenessTier.SIGNIFICANT
    assert tier(datetime(2025, 3, 10, 11, 1)) == LatenessTier.EXTENDED


def test_overnight_shift_uses_wrapped_window():
    attendance = InMemoryAttendance()
    rec = _record(attendance, "2001", datetime(2025, 3, 10, 20, 50), datetime(2025, 3, 11, 5, 20))

    timing = _classifier(attendance).classify_record(rec, NIGHT)

    assert timing.arrival_status == ArrivalStatus.EARLY
    assert timing.early_minutes == 10
    assert timing.expected_departure == datetime(2025, 3, 11, 5, 0)
    assert timing.departure_status == DepartureStatus.ON_TIME


def test_classify_pending_walks_batches_and_skips_processed(fixed_now):
    attendance = InMemoryAttendance()
    for hour, minute in ((8, 45), (9, 15), (10, 45)):
        _record(attendance, "1001", datetime(2025, 3, 10, hour, minute), datetime(2025, 3, 10, 17, 0))
    _record(attendance, "3001", datetime(2025, 3, 10, 9, 0))
    classifier = _classifier(attendance, batch_size=2)

    result = classifier.classify_pending(now=fixed_now)

    assert result.processed == 4
    assert result.by_arrival == {"early": 1, "grace": 1, "late": 1, "on_time": 1}
    assert result.by_departure == {"on_time": 3, "incomplete": 1}
    assert result.total_deduction_minutes == 105
    assert all(r.timing_processed_at == fixed_now for r in attendance.rows.values())
    # employee without a shift falls back to the 09:00-17:00 window
    assert attendance.rows[4].shift_id is None
    assert attendance.rows[4].expected_arrival == datetime(2025, 3, 10, 9, 0)

    assert classifier.classify_pending(now=fixed_now).processed == 0
    assert classifier.classify_pending(now=fixed_now, reclassify=True).processed == 4


def test_short_grace_late_arrival_below_minor_tier_has_no_tier():
    strict = Shift(shift_id=3, shift_name="Strict", start_time=time(9, 0), end_time=time(17, 0), grace_minutes=5)
    attendance = InMemoryAttendance()
    classifier = _classifier(attendance)

    timing = classifier.classify_record(_record(attendance, "1001", datetime(2025, 3, 10, 9, 20)), strict)

    assert timing.arrival_status == ArrivalStatus.LATE
    assert timing.late_minutes == 20
    assert timing.deduction_minutes == 20
    assert timing.lateness_tier == LatenessTier.NONE

    timing = classifier.classify_record(_record(attendance, "1001", datetime(2025, 3, 10, 9, 31)), strict)
    assert timing.lateness_tier == LatenessTier.MINOR
