from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..attendance.normalizer import AttendanceNormalizer, NormalizationResult
from ..biotime.poller import BiometricPoller, PollResult
from ..common.datetime_utils import now_local
from ..core.exceptions import BioTimeError
from ..overbilling.service import AntiOverbillingProcessor, OverbillingSummary
from ..timing.model import ClassificationResult
from ..timing.service import TimingClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineRunResult:
    started_at: datetime
    poll: Optional[PollResult]
    poll_error: Optional[str]
    normalization: NormalizationResult
    classification: ClassificationResult
    overbilling: Optional[OverbillingSummary]

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "poll": self.poll.to_dict() if self.poll else None,
            "poll_error": self.poll_error,
            "normalization": self.normalization.to_dict(),
            "classification": self.classification.to_dict(),
            "overbilling": self.overbilling.to_dict() if self.overbilling else None,
        }


class ReconciliationPipeline:
    """One pass: poll BioTime, normalize staged punches, classify timing, cap hours.

    A BioTime outage does not stop the pass; the later steps still work
    through whatever is already staged.
    """

    def __init__(
        self,
        poller: BiometricPoller,
        normalizer: AttendanceNormalizer,
        classifier: TimingClassifier,
        overbilling: AntiOverbillingProcessor,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._poller = poller
        self._normalizer = normalizer
        self._classifier = classifier
        self._overbilling = overbilling
        self._clock = clock

    def run_once(self, *, now: Optional[datetime] = None) -> PipelineRunResult:
        now = now or self._clock()

        poll: Optional[PollResult] = None
        poll_error: Optional[str] = None
        try:
            poll = self._poller.poll(now=now)
        except BioTimeError as exc:
            poll_error = str(exc)
            logger.exception("BioTime poll failed; continuing with staged punches")

        normalization = self._normalizer.process(now=now)
        classification = self._classifier.classify_pending(now=now)

        start, end = self._overbilling_window(normalization.work_dates, now.date())
        overbilling = self._overbilling.process(start=start, end=end, now=now)

        logger.info(
            "Pipeline pass done: fetched=%s normalized=%s classified=%s capped=%s",
            poll.fetched if poll else 0,
            normalization.created + normalization.updated,
            classification.processed,
            overbilling.adjustments_made,
        )
        return PipelineRunResult(
            started_at=now,
            poll=poll,
            poll_error=poll_error,
            normalization=normalization,
            classification=classification,
            overbilling=overbilling,
        )

    @staticmethod
    def _overbilling_window(work_dates: set[date], today: date) -> tuple[date, date]:
        # Yesterday is always rechecked: sessions left open overnight have no new punches.
        start = min(work_dates | {today - timedelta(days=1)})
        return start, max(work_dates | {today})
