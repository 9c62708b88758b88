from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import ArrivalStatus, DepartureStatus
from .base import ArrivalDecision, DepartureDecision, TimingStrategy


class LateStrategy(TimingStrategy):
    """Arrived after grace / stayed past the departure tolerance."""

    def decide_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> ArrivalDecision:
        return ArrivalDecision(status=ArrivalStatus.LATE, late_minutes=minutes_between(shift_start, check_in))

    def decide_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> DepartureDecision:
        return DepartureDecision(
            status=DepartureStatus.LATE,
            late_departure_minutes=minutes_between(shift_end, check_out),
        )
