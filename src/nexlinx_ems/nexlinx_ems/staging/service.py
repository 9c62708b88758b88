from __future__ import annotations

import logging
from dataclasses import dataclass

from .repository import StagingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateCleanupResult:
    groups: int
    removed: int


class StagingMaintenanceService:
    """Removes staged punches that repeat (emp_code, punch_time, punch_state).

    biotime_id is already unique in staging; this catches rows that reached
    the table without an id or under two ids for the same physical punch.
    """

    def __init__(self, staging: StagingRepository):
        self._staging = staging

    def count_duplicates(self) -> int:
        return sum(len(g.redundant_ids) for g in self._staging.find_duplicate_groups())

    def remove_duplicates(self) -> DuplicateCleanupResult:
        groups = self._staging.find_duplicate_groups()
        redundant = [sid for g in groups for sid in g.redundant_ids]
        removed = self._staging.delete_by_ids(redundant)
        if removed:
            logger.info("Removed %s duplicate staged punches across %s groups", removed, len(groups))
        return DuplicateCleanupResult(groups=len(groups), removed=removed)
