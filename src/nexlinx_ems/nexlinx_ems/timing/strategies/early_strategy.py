from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import ArrivalStatus, DepartureStatus
from .base import ArrivalDecision, DepartureDecision, TimingStrategy


class EarlyStrategy(TimingStrategy):
    """Arrived before shift start / left before shift end."""

    def decide_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> ArrivalDecision:
        return ArrivalDecision(status=ArrivalStatus.EARLY, early_minutes=minutes_between(check_in, shift_start))

    def decide_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> DepartureDecision:
        return DepartureDecision(
            status=DepartureStatus.EARLY,
            early_departure_minutes=minutes_between(check_out, shift_end),
        )
