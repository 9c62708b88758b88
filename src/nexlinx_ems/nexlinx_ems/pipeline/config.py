from __future__ import annotations

from dataclasses import dataclass, fields

from ..core import constants


@dataclass(frozen=True)
class PipelineConfig:
    """Tunables for the reconciliation steps; defaults mirror core.constants."""

    grace_minutes: int = constants.DEFAULT_GRACE_MINUTES
    departure_on_time_minutes: int = constants.DEPARTURE_ON_TIME_MINUTES
    max_session_hours: int = constants.MAX_SESSION_HOURS
    max_overtime_hours: int = constants.MAX_OVERTIME_HOURS
    standard_day_hours: int = constants.STANDARD_DAY_HOURS
    max_working_hours: int = constants.MAX_WORKING_HOURS
    auto_punchout_threshold_hours: int = constants.AUTO_PUNCHOUT_THRESHOLD_HOURS
    missed_punch_penalty_hours: int = constants.MISSED_PUNCH_PENALTY_HOURS
    duplicate_tap_minutes: int = constants.DUPLICATE_TAP_MINUTES
    poll_overlap_minutes: int = constants.POLL_OVERLAP_MINUTES
    initial_lookback_hours: int = constants.INITIAL_LOOKBACK_HOURS
    sparse_day_threshold: int = constants.SPARSE_DAY_THRESHOLD
    gap_scan_days: int = constants.GAP_SCAN_DAYS
    normalizer_batch_size: int = constants.NORMALIZER_BATCH_SIZE
    classifier_batch_size: int = constants.CLASSIFIER_BATCH_SIZE
    classifier_lookback_days: int = constants.CLASSIFIER_LOOKBACK_DAYS
    poll_interval_minutes: int = 5
    gap_fill_interval_minutes: int = 60
    cleanup_hour: int = 2

    @classmethod
    def from_dict(cls, values: dict | None) -> "PipelineConfig":
        values = values or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: int(v) for k, v in values.items() if k in known and v is not None})
