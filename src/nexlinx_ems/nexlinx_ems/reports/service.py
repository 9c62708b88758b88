from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_hours
from ..common.validators import require_date_range
from ..core.enums import ArrivalStatus, AttendanceStatus
from ..employees.repository import EmployeeRepository
from .calculator.base import PayableHoursCalculator
from .calculator.standard_calculator import StandardPayableCalculator


@dataclass(frozen=True)
class DailyMetrics:
    work_date: date
    total_employees: int
    present: int
    complete: int
    incomplete: int
    auto_punchout: int
    non_bio: int
    absent: int
    late: int

    def to_dict(self) -> dict:
        return {
            "work_date": self.work_date.isoformat(),
            "total_employees": self.total_employees,
            "present": self.present,
            "complete": self.complete,
            "incomplete": self.incomplete,
            "auto_punchout": self.auto_punchout,
            "non_bio": self.non_bio,
            "absent": self.absent,
            "late": self.late,
        }


@dataclass(frozen=True)
class HoursReport:
    rows: list[dict]
    summary: list[dict]

    def to_dict(self) -> dict:
        return {"rows": self.rows, "summary": self.summary}


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[PayableHoursCalculator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calculator = calculator or StandardPayableCalculator()

    def daily_metrics(self, work_date: date) -> DailyMetrics:
        employees = list(self._employees.list_active())
        active_codes = {e.emp_code for e in employees}
        non_bio_codes = {e.emp_code for e in employees if e.non_bio}

        records = [
            r for r in self._attendance.list_range(start=work_date, end=work_date)
            if r.emp_code in active_codes
        ]
        present_codes = {r.emp_code for r in records}

        absent = len(active_codes - non_bio_codes - present_codes)
        return DailyMetrics(
            work_date=work_date,
            total_employees=len(active_codes),
            present=len(present_codes),
            complete=sum(1 for r in records if r.status == AttendanceStatus.COMPLETE),
            incomplete=sum(1 for r in records if r.status == AttendanceStatus.INCOMPLETE),
            auto_punchout=sum(1 for r in records if r.status == AttendanceStatus.AUTO_PUNCHOUT),
            non_bio=len(non_bio_codes),
            absent=absent,
            late=sum(1 for r in records if r.arrival_status == ArrivalStatus.LATE),
        )

    def hours_report(self, *, start: date, end: date, emp_code: Optional[str] = None) -> HoursReport:
        require_date_range(start, end)
        query_rows = self._attendance.get_report_rows(start_date=start, end_date=end, emp_code=emp_code)

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            minutes = self._calculator.payable_minutes(r)

            out_rows.append(
                {
                    "emp_code": r.emp_code,
                    "full_name": r.full_name,
                    "department": r.department or "-",
                    "shift_name": r.shift_name or "-",
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "check_in": r.check_in.strftime("%H:%M"),
                    "check_out": r.check_out.strftime("%H:%M") if r.check_out else "-",
                    "payable_hours": format_hours(minutes),
                    "status": r.status.value,
                    "arrival_status": r.arrival_status.value if r.arrival_status else "-",
                    "deduction_minutes": r.deduction_minutes,
                    "notes": r.notes or "",
                }
            )

            s = summary_map.get(r.emp_code)
            if not s:
                s = {
                    "emp_code": r.emp_code,
                    "full_name": r.full_name,
                    "days": 0,
                    "total_minutes": 0,
                }
                summary_map[r.emp_code] = s
            s["days"] += 1
            s["total_minutes"] += minutes

        summary = []
        for s in sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True):
            summary.append(
                {
                    "emp_code": s["emp_code"],
                    "full_name": s["full_name"],
                    "days": s["days"],
                    "total_hours": format_hours(s["total_minutes"]),
                }
            )

        return HoursReport(rows=out_rows, summary=summary)
