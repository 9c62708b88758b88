from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..biotime.model import RawPunch
from .model import DuplicateGroup, StagedPunch


class StagingRepository(Protocol):
    def insert_punches(self, punches: Sequence[RawPunch], *, pulled_at: datetime) -> int:
        """Stage punches, ignoring biotime_ids already present.

        Returns the number of rows actually inserted.
        """

        raise NotImplementedError

    def last_punch_time(self) -> Optional[datetime]:
        raise NotImplementedError

    def max_biotime_id(self) -> Optional[int]:
        raise NotImplementedError

    def biotime_ids_since(self, since_id: int) -> Sequence[int]:
        """Sorted biotime_ids >= since_id."""

        raise NotImplementedError

    def min_biotime_id_since(self, since: datetime) -> Optional[int]:
        raise NotImplementedError

    def counts_by_day(self, *, start: date, end: date) -> dict[date, int]:
        raise NotImplementedError

    def list_unprocessed(self, limit: int) -> Sequence[StagedPunch]:
        raise NotImplementedError

    def list_for_employee_between(self, *, emp_code: str, start: datetime, end: datetime) -> Sequence[StagedPunch]:
        raise NotImplementedError

    def mark_processed(self, staging_ids: Sequence[int], *, processed_at: datetime, error: Optional[str] = None) -> int:
        raise NotImplementedError

    def find_duplicate_groups(self) -> Sequence[DuplicateGroup]:
        raise NotImplementedError

    def delete_by_ids(self, staging_ids: Sequence[int]) -> int:
        raise NotImplementedError
