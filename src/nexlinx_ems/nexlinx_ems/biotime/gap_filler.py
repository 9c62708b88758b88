from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import daterange, now_local
from ..common.validators import require_date_range
from ..core.constants import GAP_SCAN_DAYS, SPARSE_DAY_THRESHOLD
from ..core.exceptions import BioTimeError
from ..staging.repository import StagingRepository
from .poller import BiometricPoller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdGap:
    start_id: int
    end_id: int

    @property
    def size(self) -> int:
        return self.end_id - self.start_id + 1


@dataclass
class GapFillReport:
    start: date
    end: date
    sparse_days: list[date] = field(default_factory=list)
    id_gaps: list[IdGap] = field(default_factory=list)
    records_added: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "sparse_days": [d.isoformat() for d in self.sparse_days],
            "id_gaps": [{"start_id": g.start_id, "end_id": g.end_id, "size": g.size} for g in self.id_gaps],
            "records_added": self.records_added,
            "errors": list(self.errors),
        }


def find_id_gaps(ids: list[int]) -> list[IdGap]:
    """Missing runs inside a sorted list of biotime_ids."""
    gaps: list[IdGap] = []
    for prev, cur in zip(ids, ids[1:]):
        if cur - prev > 1:
            gaps.append(IdGap(start_id=prev + 1, end_id=cur - 1))
    return gaps


class GapFiller:
    """Re-pulls what an outage may have dropped.

    Two signals: days whose staged punch count is below a threshold, and
    holes in the biotime_id sequence. Re-pulling is idempotent because
    staging ignores known biotime_ids.
    """

    def __init__(
        self,
        poller: BiometricPoller,
        staging: StagingRepository,
        *,
        sparse_threshold: int = SPARSE_DAY_THRESHOLD,
        scan_days: int = GAP_SCAN_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._poller = poller
        self._staging = staging
        self._threshold = int(sparse_threshold)
        self._scan_days = int(scan_days)
        self._clock = clock

    def find_sparse_days(self, start: date, end: date) -> list[date]:
        require_date_range(start, end)
        counts = self._staging.counts_by_day(start=start, end=end)
        return [day for day in daterange(start, end) if counts.get(day, 0) < self._threshold]

    def find_id_gaps(self, since_id: int) -> list[IdGap]:
        return find_id_gaps(list(self._staging.biotime_ids_since(since_id)))

    def fill(self, start: Optional[date] = None, end: Optional[date] = None, *, now: Optional[datetime] = None) -> GapFillReport:
        now = now or self._clock()
        # Today is always sparse until the day is over.
        end = end or (now.date() - timedelta(days=1))
        start = start or (end - timedelta(days=self._scan_days - 1))
        require_date_range(start, end)

        report = GapFillReport(start=start, end=end)

        report.sparse_days = self.find_sparse_days(start, end)
        for day in report.sparse_days:
            day_start = datetime.combine(day, time.min)
            if day_start > now:
                continue
            day_end = min(datetime.combine(day, time.max).replace(microsecond=0), now)
            try:
                result = self._poller.pull_range(day_start, day_end, now=now)
            except BioTimeError as exc:
                logger.error("Gap fill for %s failed: %s", day, exc)
                report.errors.append(f"{day.isoformat()}: {exc}")
                continue
            report.records_added += result.inserted

        since_id = self._staging.min_biotime_id_since(datetime.combine(start, time.min))
        if since_id is not None:
            report.id_gaps = self.find_id_gaps(since_id)
            for gap in report.id_gaps:
                try:
                    result = self._poller.pull_id_range(gap.start_id, gap.end_id, now=now)
                except BioTimeError as exc:
                    logger.error("Gap fill for ids %s-%s failed: %s", gap.start_id, gap.end_id, exc)
                    report.errors.append(f"ids {gap.start_id}-{gap.end_id}: {exc}")
                    continue
                report.records_added += result.inserted

        logger.info(
            "Gap fill %s..%s: %s sparse days, %s id gaps, %s records added, %s errors",
            start, end, len(report.sparse_days), len(report.id_gaps), report.records_added, len(report.errors),
        )
        return report
