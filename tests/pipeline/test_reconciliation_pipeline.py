from __future__ import annotations

from datetime import date, datetime, time

from src.nexlinx_ems.nexlinx_ems.attendance.normalizer import AttendanceNormalizer
from src.nexlinx_ems.nexlinx_ems.biotime.poller import BiometricPoller
from src.nexlinx_ems.nexlinx_ems.core.enums import ArrivalStatus, AttendanceStatus
from src.nexlinx_ems.nexlinx_ems.core.exceptions import BioTimeError
from src.nexlinx_ems.nexlinx_ems.employees.model import Employee
from src.nexlinx_ems.nexlinx_ems.overbilling.service import AntiOverbillingProcessor
from src.nexlinx_ems.nexlinx_ems.pipeline.config import PipelineConfig
from src.nexlinx_ems.nexlinx_ems.pipeline.service import ReconciliationPipeline
from src.nexlinx_ems.nexlinx_ems.shifts.model import Shift
from src.nexlinx_ems.nexlinx_ems.shifts.resolver import ShiftResolver
from src.nexlinx_ems.nexlinx_ems.timing.service import TimingClassifier
from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemoryShifts, InMemoryStaging

DAY = Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0))


class FakeClient:
    def __init__(self, rows=None, *, error: Exception | None = None):
        self.rows = rows or []
        self.error = error

    def iter_transaction_pages(self, start, end):
        if self.error:
            raise self.error
        return iter([self.rows])


def _pipeline(client, staging, attendance):
    employees = InMemoryEmployees.of(Employee(1, "1001", "Ali", shift_id=1))
    resolver = ShiftResolver(InMemoryShifts({1: DAY}), employees)
    return ReconciliationPipeline(
        BiometricPoller(client, staging),
        AttendanceNormalizer(staging, attendance, employees, resolver),
        TimingClassifier(attendance, resolver),
        AntiOverbillingProcessor(attendance, resolver),
    )


def test_one_pass_turns_punches_into_classified_rows(fixed_now):
    rows = [
        {"id": 1, "emp_code": "1001", "punch_time": "2025-03-09 09:40:00", "punch_state": "0", "terminal_alias": "Gate"},
        {"id": 2, "emp_code": "1001", "punch_time": "2025-03-09 21:00:00", "punch_state": "1", "terminal_alias": "Gate"},
        {"id": 3, "emp_code": "1001", "punch_time": "2025-03-10 08:55:00", "punch_state": "0", "terminal_alias": "Gate"},
    ]
    staging = InMemoryStaging()
    attendance = InMemoryAttendance()

    result = _pipeline(FakeClient(rows), staging, attendance).run_once(now=fixed_now)

    assert result.poll_error is None
    assert result.poll.inserted == 3
    assert result.normalization.created == 2
    assert result.classification.processed == 2

    yesterday = attendance.get_for_employee_and_date("1001", date(2025, 3, 9))
    assert yesterday.arrival_status == ArrivalStatus.LATE
    assert yesterday.late_minutes == 40
    assert yesterday.check_out == datetime(2025, 3, 9, 21, 0)
    # 11h20m exceeds check-in + 8h + 3h
    assert yesterday.adjusted_hours == 11.0

    today = attendance.get_for_employee_and_date("1001", date(2025, 3, 10))
    assert today.status == AttendanceStatus.INCOMPLETE
    assert today.arrival_status == ArrivalStatus.EARLY
    assert today.adjusted_at is None
    assert result.to_dict()["overbilling"]["adjustments_made"] == 1


def test_biotime_outage_still_processes_staged_punches(fixed_now):
    staging = InMemoryStaging()
    staging.add("1001", datetime(2025, 3, 10, 9, 0), "0")
    attendance = InMemoryAttendance()

    result = _pipeline(FakeClient(error=BioTimeError("down")), staging, attendance).run_once(now=fixed_now)

    assert result.poll is None
    assert result.poll_error == "down"
    assert result.normalization.created == 1
    assert result.classification.processed == 1


def test_pipeline_config_ignores_unknown_keys():
    config = PipelineConfig.from_dict({"grace_minutes": "15", "unknown": 3, "poll_interval_minutes": None})
    assert config.grace_minutes == 15
    assert config.poll_interval_minutes == 5
