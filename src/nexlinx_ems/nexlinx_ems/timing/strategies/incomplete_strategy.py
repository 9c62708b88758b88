from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import DepartureStatus
from ...core.exceptions import ProcessingError
from .base import ArrivalDecision, DepartureDecision, TimingStrategy


class IncompleteStrategy(TimingStrategy):
    """No punch-out recorded."""

    def decide_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> ArrivalDecision:
        raise ProcessingError("IncompleteStrategy only describes departures")

    def decide_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> DepartureDecision:
        return DepartureDecision(status=DepartureStatus.INCOMPLETE)
