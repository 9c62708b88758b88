from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import (
    DEFAULT_GRACE_MINUTES,
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_NAME,
    DEFAULT_SHIFT_START,
)

ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)


@dataclass(frozen=True)
class Shift:
    """Domain entity: a work shift.

    days_of_week uses Python weekday numbers (Monday=0). A shift whose end
    is not after its start runs overnight into the next calendar day.
    """

    shift_id: Optional[int]
    shift_name: str
    start_time: time
    end_time: time
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    break_minutes: int = 0
    days_of_week: tuple[int, ...] = field(default=ALL_DAYS)
    is_active: bool = True

    @property
    def is_overnight(self) -> bool:
        return self.end_time <= self.start_time

    def window_for(self, work_date: date) -> tuple[datetime, datetime]:
        start = datetime.combine(work_date, self.start_time)
        end = datetime.combine(work_date, self.end_time)
        if self.is_overnight:
            end += timedelta(days=1)
        return start, end

    @property
    def duration_minutes(self) -> int:
        start, end = self.window_for(date(2000, 1, 1))
        return int((end - start).total_seconds() // 60)

    def works_on(self, work_date: date) -> bool:
        return work_date.weekday() in self.days_of_week


def default_shift(*, grace_minutes: int = DEFAULT_GRACE_MINUTES) -> Shift:
    """Synthetic fallback window for employees with no shift at all."""
    return Shift(
        shift_id=None,
        shift_name=DEFAULT_SHIFT_NAME,
        start_time=DEFAULT_SHIFT_START,
        end_time=DEFAULT_SHIFT_END,
        grace_minutes=grace_minutes,
    )


def parse_days_of_week(value) -> tuple[int, ...]:
    if value is None or value == "":
        return ALL_DAYS
    if isinstance(value, (list, tuple, set)):
        return tuple(sorted(int(v) for v in value))
    return tuple(sorted(int(part) for part in str(value).split(",") if part.strip().isdigit()))
