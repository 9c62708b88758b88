from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..core.constants import DEPARTURE_ON_TIME_MINUTES
from .strategies.base import TimingStrategy
from .strategies.early_strategy import EarlyStrategy
from .strategies.grace_strategy import GraceStrategy
from .strategies.incomplete_strategy import IncompleteStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class TimingStrategyFactory:
    """Factory Pattern: choose the strategy for a punch from its offset to the shift window."""

    departure_on_time_minutes: int = DEPARTURE_ON_TIME_MINUTES

    def for_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> TimingStrategy:
        diff = minutes_between(shift_start, check_in)
        if diff < 0:
            return EarlyStrategy()
        if diff == 0:
            return OnTimeStrategy()
        if diff <= grace_minutes:
            return GraceStrategy()
        return LateStrategy()

    def for_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> TimingStrategy:
        if check_out is None:
            return IncompleteStrategy()

        diff = minutes_between(shift_end, check_out)
        if diff < 0:
            return EarlyStrategy()
        if diff <= self.departure_on_time_minutes:
            return OnTimeStrategy()
        return LateStrategy()
