from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import INITIAL_LOOKBACK_HOURS, POLL_OVERLAP_MINUTES
from ..core.exceptions import ValidationError
from ..staging.repository import StagingRepository
from .client import BioTimeClient
from .model import RawPunch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollResult:
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    start_id: Optional[int] = None
    end_id: Optional[int] = None
    fetched: int = 0
    inserted: int = 0
    duplicates: int = 0
    access_control: int = 0
    rejected: int = 0

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "start_id": self.start_id,
            "end_id": self.end_id,
            "fetched": self.fetched,
            "inserted": self.inserted,
            "duplicates": self.duplicates,
            "access_control": self.access_control,
            "rejected": self.rejected,
        }


class BiometricPoller:
    """Pulls BioTime transactions into the staging table.

    Each poll re-reads a small overlap before the newest staged punch so
    that punches uploaded late by a terminal are not missed; staging ignores
    biotime_ids it already holds.
    """

    def __init__(
        self,
        client: BioTimeClient,
        staging: StagingRepository,
        *,
        overlap_minutes: int = POLL_OVERLAP_MINUTES,
        initial_lookback_hours: int = INITIAL_LOOKBACK_HOURS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._client = client
        self._staging = staging
        self._overlap = timedelta(minutes=int(overlap_minutes))
        self._initial_lookback = timedelta(hours=int(initial_lookback_hours))
        self._clock = clock

    def poll(self, *, now: Optional[datetime] = None) -> PollResult:
        now = now or self._clock()
        last = self._staging.last_punch_time()
        start = (last - self._overlap) if last else (now - self._initial_lookback)
        if start >= now:
            # Terminal clocks ahead of ours; still read the recent past.
            start = now - self._overlap
        return self.pull_range(start, now, now=now)

    def pull_range(self, start: datetime, end: datetime, *, now: Optional[datetime] = None) -> PollResult:
        if end < start:
            raise ValidationError(f"Invalid pull window: {start} > {end}")

        logger.info("Pulling BioTime punches %s .. %s", start, end)
        counts = self._stage_pages(self._client.iter_transaction_pages(start, end), pulled_at=now or self._clock())
        result = PollResult(start=start, end=end, **counts)
        logger.info(
            "BioTime pull done: fetched=%s inserted=%s duplicates=%s access_control=%s rejected=%s",
            result.fetched, result.inserted, result.duplicates, result.access_control, result.rejected,
        )
        return result

    def pull_id_range(self, start_id: int, end_id: int, *, now: Optional[datetime] = None) -> PollResult:
        if int(end_id) < int(start_id):
            raise ValidationError(f"Invalid id range: {start_id} > {end_id}")

        logger.info("Pulling BioTime punches by id %s .. %s", start_id, end_id)
        counts = self._stage_pages(
            self._client.iter_transaction_pages_by_id(start_id, end_id), pulled_at=now or self._clock()
        )
        return PollResult(start_id=int(start_id), end_id=int(end_id), **counts)

    def _stage_pages(self, pages: Iterable[list[dict]], *, pulled_at: datetime) -> dict:
        counts = {"fetched": 0, "inserted": 0, "duplicates": 0, "access_control": 0, "rejected": 0}

        for page in pages:
            parsed: list[RawPunch] = []
            for row in page:
                try:
                    parsed.append(RawPunch.from_api(row))
                except ValidationError as exc:
                    logger.warning("Rejected BioTime row: %s", exc)
                    counts["rejected"] += 1

            inserted = self._staging.insert_punches(parsed, pulled_at=pulled_at)
            counts["fetched"] += len(page)
            counts["inserted"] += inserted
            counts["duplicates"] += len(parsed) - inserted
            counts["access_control"] += sum(1 for p in parsed if p.is_access_control)

        return counts
