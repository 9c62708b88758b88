from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Schedule


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, *, emp_code: str, work_date: date) -> Optional[Schedule]:
        raise NotImplementedError

    def upsert(self, *, emp_code: str, work_date: date, shift_id: int, note: Optional[str] = None) -> int:
        """Create or update a shift assignment.

        Returns schedule_id.
        """

        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, emp_code: Optional[str] = None) -> Sequence[Schedule]:
        raise NotImplementedError
