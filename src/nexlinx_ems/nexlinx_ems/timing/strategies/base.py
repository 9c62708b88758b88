from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import ArrivalStatus, DepartureStatus


@dataclass(frozen=True)
class ArrivalDecision:
    status: ArrivalStatus
    early_minutes: int = 0
    grace_minutes_used: int = 0
    late_minutes: int = 0

    @property
    def deduction_minutes(self) -> int:
        # Grace is free; once past it the whole delay counts.
        return self.late_minutes if self.status == ArrivalStatus.LATE else 0


@dataclass(frozen=True)
class DepartureDecision:
    status: DepartureStatus
    early_departure_minutes: int = 0
    late_departure_minutes: int = 0

    @property
    def deduction_minutes(self) -> int:
        return self.early_departure_minutes if self.status == DepartureStatus.EARLY else 0


class TimingStrategy(ABC):
    """Strategy Pattern: encapsulate how a punch is labelled against its shift window."""

    @abstractmethod
    def decide_arrival(self, *, check_in: datetime, shift_start: datetime, grace_minutes: int) -> ArrivalDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_departure(self, *, check_out: Optional[datetime], shift_end: datetime) -> DepartureDecision:
        raise NotImplementedError
