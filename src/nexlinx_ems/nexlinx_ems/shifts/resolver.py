from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_GRACE_MINUTES
from ..employees.repository import EmployeeRepository
from ..schedules.repository import ScheduleRepository
from .model import Shift, default_shift
from .repository import ShiftRepository


class ShiftResolver:
    """Effective shift for an employee on a date.

    Priority: dated assignment, then the employee's default shift when its
    days_of_week include the date, then the configured default window.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository | None = None,
        *,
        default_grace_minutes: int = DEFAULT_GRACE_MINUTES,
    ):
        self._shifts = shifts
        self._employees = employees
        self._schedules = schedules
        self._fallback = default_shift(grace_minutes=int(default_grace_minutes))

    def resolve(self, emp_code: str, work_date: date) -> Shift:
        shift = self._assigned_shift(emp_code, work_date)
        return shift or self._fallback

    def _assigned_shift(self, emp_code: str, work_date: date) -> Optional[Shift]:
        if self._schedules:
            sc = self._schedules.get_for_employee_and_date(emp_code=emp_code, work_date=work_date)
            if sc:
                shift = self._shifts.get_by_id(sc.shift_id)
                if shift:
                    return shift

        employee = self._employees.get_by_code(emp_code)
        if employee and employee.shift_id:
            shift = self._shifts.get_by_id(employee.shift_id)
            if shift and shift.works_on(work_date):
                return shift
        return None
