from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import ArrivalStatus, DepartureStatus
from .base import ArrivalDecision, DepartureDecision, TimingStrategy


class OnTimeStrategy(TimingStrategy):
    def decide_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> ArrivalDecision:
        return ArrivalDecision(status=ArrivalStatus.ON_TIME)

    def decide_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> DepartureDecision:
        return DepartureDecision(status=DepartureStatus.ON_TIME)
