from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceReportRow


class PayableHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for payable time)."""

    @abstractmethod
    def payable_minutes(self, row: AttendanceReportRow) -> int:
        raise NotImplementedError
