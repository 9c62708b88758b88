from datetime import date, time

import pytest

from src.nexlinx_ems.nexlinx_ems.core.exceptions import ValidationError
from src.nexlinx_ems.nexlinx_ems.employees.model import Employee
from src.nexlinx_ems.nexlinx_ems.schedules.service import ScheduleService
from src.nexlinx_ems.nexlinx_ems.shifts.model import Shift
from tests.fakes import InMemoryEmployees, InMemorySchedules, InMemoryShifts

DAY = Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0))
RETIRED = Shift(shift_id=3, shift_name="Old", start_time=time(7, 0), end_time=time(15, 0), is_active=False)


def _service(schedules=None):
    return ScheduleService(
        schedules or InMemorySchedules(),
        InMemoryShifts({1: DAY, 3: RETIRED}),
        InMemoryEmployees.of(Employee(1, "1001", "Ali")),
    )


def test_assign_is_an_upsert_per_employee_and_date():
    schedules = InMemorySchedules()
    svc = _service(schedules)

    first = svc.assign(emp_code="1001", work_date=date(2025, 3, 10), shift_id=1, note="  cover  ")
    second = svc.assign(emp_code="1001", work_date=date(2025, 3, 10), shift_id=1)

    assert first == second
    assert len(schedules.rows) == 1
    assert svc.list_range(start=date(2025, 3, 1), end=date(2025, 3, 31))[0].emp_code == "1001"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"emp_code": "", "shift_id": 1},
        {"emp_code": "9999", "shift_id": 1},
        {"emp_code": "1001", "shift_id": 3},
        {"emp_code": "1001", "shift_id": 42},
    ],
)
def test_assign_rejects_bad_input(kwargs):
    with pytest.raises(ValidationError):
        _service().assign(work_date=date(2025, 3, 10), **kwargs)


def test_delete_unknown_schedule():
    with pytest.raises(ValidationError):
        _service().delete(schedule_id=7)
