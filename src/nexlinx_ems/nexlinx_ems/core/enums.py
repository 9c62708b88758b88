from __future__ import annotations

from enum import Enum


class PunchState(str, Enum):
    """BioTime punch_state codes."""

    IN = "0"
    OUT = "1"
    BREAK_OUT = "2"
    BREAK_IN = "3"
    OT_IN = "4"
    OT_OUT = "5"

    @classmethod
    def parse(cls, value) -> "PunchState | None":
        if value is None:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None

    @property
    def is_in(self) -> bool:
        return self in (PunchState.IN, PunchState.OT_IN)

    @property
    def is_out(self) -> bool:
        return self in (PunchState.OUT, PunchState.OT_OUT)


class AttendanceStatus(str, Enum):
    """Canonical attendance row status stored in the database."""

    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    AUTO_PUNCHOUT = "auto_punchout"


class ArrivalStatus(str, Enum):
    EARLY = "early"
    ON_TIME = "on_time"
    GRACE = "grace"
    LATE = "late"


class DepartureStatus(str, Enum):
    EARLY = "early"
    ON_TIME = "on_time"
    LATE = "late"
    INCOMPLETE = "incomplete"


class LatenessTier(str, Enum):
    """Policy buckets for late arrivals."""

    NONE = "none"
    MINOR = "minor"
    SIGNIFICANT = "significant"
    EXTENDED = "extended"
