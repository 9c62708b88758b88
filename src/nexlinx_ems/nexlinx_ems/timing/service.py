from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..core.constants import CLASSIFIER_BATCH_SIZE, CLASSIFIER_LOOKBACK_DAYS
from ..shifts.model import Shift
from ..shifts.resolver import ShiftResolver
from .factory import TimingStrategyFactory
from .model import ClassificationResult, TimingResult
from .policy import lateness_tier

logger = logging.getLogger(__name__)


class TimingClassifier:
    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: ShiftResolver,
        *,
        strategy_factory: TimingStrategyFactory | None = None,
        batch_size: int = CLASSIFIER_BATCH_SIZE,
        lookback_days: int = CLASSIFIER_LOOKBACK_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._factory = strategy_factory or TimingStrategyFactory()
        self._batch_size = int(batch_size)
        self._lookback_days = int(lookback_days)
        self._clock = clock

    def classify_record(self, record: AttendanceRecord, shift: Shift) -> TimingResult:
        shift_start, shift_end = shift.window_for(record.work_date)

        arrival_strategy = self._factory.for_arrival(
            check_in=record.check_in, shift_start=shift_start, grace_minutes=shift.grace_minutes
        )
        arrival = arrival_strategy.decide_arrival(
            check_in=record.check_in, shift_start=shift_start, grace_minutes=shift.grace_minutes
        )

        departure_strategy = self._factory.for_departure(check_out=record.check_out, shift_end=shift_end)
        departure = departure_strategy.decide_departure(check_out=record.check_out, shift_end=shift_end)

        return TimingResult(
            shift_id=shift.shift_id,
            arrival_status=arrival.status,
            departure_status=departure.status,
            expected_arrival=shift_start,
            expected_departure=shift_end,
            early_minutes=arrival.early_minutes,
            late_minutes=arrival.late_minutes,
            grace_minutes_used=arrival.grace_minutes_used,
            early_departure_minutes=departure.early_departure_minutes,
            late_departure_minutes=departure.late_departure_minutes,
            deduction_minutes=arrival.deduction_minutes + departure.deduction_minutes,
            lateness_tier=lateness_tier(arrival.status, arrival.late_minutes),
        )

    def classify_pending(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        reclassify: bool = False,
        now: Optional[datetime] = None,
    ) -> ClassificationResult:
        now = now or self._clock()
        end = end or now.date()
        start = start or (end - timedelta(days=self._lookback_days))
        require_date_range(start, end)

        result = ClassificationResult()
        after_id = 0
        while True:
            batch = self._attendance.list_for_classification(
                start=start,
                end=end,
                after_id=after_id,
                limit=self._batch_size,
                include_processed=reclassify,
            )
            if not batch:
                break

            for record in batch:
                shift = self._resolver.resolve(record.emp_code, record.work_date)
                timing = self.classify_record(record, shift)
                if self._attendance.save_timing(attendance_id=record.attendance_id, timing=timing, processed_at=now):
                    result.updated += 1
                result.processed += 1
                result.count(timing)

            after_id = batch[-1].attendance_id
            if len(batch) < self._batch_size:
                break

        logger.info(
            "Timing classified %s records (%s..%s): arrival=%s departure=%s",
            result.processed, start, end, result.by_arrival, result.by_departure,
        )
        return result
