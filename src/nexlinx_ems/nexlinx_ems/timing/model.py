from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ArrivalStatus, DepartureStatus, LatenessTier


@dataclass(frozen=True)
class TimingResult:
    """Arrival/departure classification of one attendance row against its shift."""

    shift_id: Optional[int]
    arrival_status: ArrivalStatus
    departure_status: DepartureStatus
    expected_arrival: datetime
    expected_departure: datetime
    early_minutes: int = 0
    late_minutes: int = 0
    grace_minutes_used: int = 0
    early_departure_minutes: int = 0
    late_departure_minutes: int = 0
    deduction_minutes: int = 0
    lateness_tier: LatenessTier = LatenessTier.NONE


@dataclass
class ClassificationResult:
    processed: int = 0
    updated: int = 0
    total_deduction_minutes: int = 0
    by_arrival: dict[str, int] = field(default_factory=dict)
    by_departure: dict[str, int] = field(default_factory=dict)

    def count(self, timing: TimingResult) -> None:
        self.by_arrival[timing.arrival_status.value] = self.by_arrival.get(timing.arrival_status.value, 0) + 1
        self.by_departure[timing.departure_status.value] = self.by_departure.get(timing.departure_status.value, 0) + 1
        self.total_deduction_minutes += timing.deduction_minutes

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "updated": self.updated,
            "total_deduction_minutes": self.total_deduction_minutes,
            "by_arrival": dict(self.by_arrival),
            "by_departure": dict(self.by_departure),
        }
