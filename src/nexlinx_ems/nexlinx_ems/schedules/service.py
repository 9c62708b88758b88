from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_date_range, require_non_empty, require_positive
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from .model import Schedule
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, shifts: ShiftRepository, employees: EmployeeRepository):
        self._schedules = schedules
        self._shifts = shifts
        self._employees = employees

    def assign(
        self,
        *,
        emp_code: str,
        work_date: date,
        shift_id: int,
        note: Optional[str] = None,
    ) -> int:
        emp_code = require_non_empty(emp_code, "emp_code")
        shift_id = require_positive(shift_id, "shift_id")

        if not self._employees.get_by_code(emp_code):
            raise ValidationError(f"Unknown employee code: {emp_code}")
        shift = self._shifts.get_by_id(shift_id)
        if not shift or not shift.is_active:
            raise ValidationError(f"Unknown or inactive shift: {shift_id}")

        note = note.strip() if note else None
        return self._schedules.upsert(emp_code=emp_code, work_date=work_date, shift_id=shift_id, note=note)

    def delete(self, *, schedule_id: int) -> None:
        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise ValidationError("Schedule not found")

    def list_range(self, *, start: date, end: date, emp_code: Optional[str] = None) -> Sequence[Schedule]:
        require_date_range(start, end)
        return self._schedules.list_range(start=start, end=end, emp_code=emp_code)
