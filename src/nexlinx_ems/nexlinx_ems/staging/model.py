from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PunchState


@dataclass(frozen=True)
class StagedPunch:
    """A raw BioTime punch as stored in the staging table."""

    staging_id: int
    biotime_id: Optional[int]
    emp_code: str
    punch_time: datetime
    punch_state: Optional[str] = None
    terminal_alias: Optional[str] = None
    is_access_control: bool = False
    pulled_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    process_error: Optional[str] = None

    @property
    def state(self) -> Optional[PunchState]:
        return PunchState.parse(self.punch_state)


@dataclass(frozen=True)
class DuplicateGroup:
    """Staged rows sharing (emp_code, punch_time, punch_state); the first id is kept."""

    emp_code: str
    punch_time: datetime
    punch_state: Optional[str]
    staging_ids: tuple[int, ...]

    @property
    def redundant_ids(self) -> tuple[int, ...]:
        return self.staging_ids[1:]
