from __future__ import annotations

from ..core.constants import MINOR_LATE_MAX_MINUTES, MINOR_LATE_MIN_MINUTES, SIGNIFICANT_LATE_MAX_MINUTES
from ..core.enums import ArrivalStatus, LatenessTier


def lateness_tier(status: ArrivalStatus, late_minutes: int) -> LatenessTier:
    """Tier by minutes past shift start; fixed ranges, independent of the shift's grace."""
    if status != ArrivalStatus.LATE or late_minutes < MINOR_LATE_MIN_MINUTES:
        return LatenessTier.NONE
    if late_minutes <= MINOR_LATE_MAX_MINUTES:
        return LatenessTier.MINOR
    if late_minutes <= SIGNIFICANT_LATE_MAX_MINUTES:
        return LatenessTier.SIGNIFICANT
    return LatenessTier.EXTENDED
