from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ArrivalStatus, AttendanceStatus, DepartureStatus, LatenessTier
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from ..timing.model import TimingResult
from .model import AttendanceRecord, AttendanceReportRow, DailySession
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, emp_code, work_date, check_in, check_out, hours_worked, status, notes,
    punch_count, last_biotime_id, shift_id, arrival_status, departure_status,
    early_minutes, late_minutes, grace_minutes_used, early_departure_minutes,
    late_departure_minutes, deduction_minutes, lateness_tier, expected_arrival,
    expected_departure, timing_processed_at, adjusted_hours, estimated_checkout,
    adjustment_reason, adjusted_at
"""

# Columns cleared when a session is rewritten so classify and overbilling re-run.
_REWRITE_RESETS = (
    ("shift_id", "NULL"),
    ("arrival_status", "NULL"),
    ("departure_status", "NULL"),
    ("early_minutes", "0"),
    ("late_minutes", "0"),
    ("grace_minutes_used", "0"),
    ("early_departure_minutes", "0"),
    ("late_departure_minutes", "0"),
    ("deduction_minutes", "0"),
    ("lateness_tier", "NULL"),
    ("expected_arrival", "NULL"),
    ("expected_departure", "NULL"),
    ("timing_processed_at", "NULL"),
    ("adjusted_hours", "NULL"),
    ("estimated_checkout", "NULL"),
    ("adjustment_reason", "NULL"),
    ("adjusted_at", "NULL"),
)
_REWRITE_RESET_SQL = ",\n".join(f"{column}={value}" for column, value in _REWRITE_RESETS)


def _enum_or_none(enum_cls, value):
    return enum_cls(value) if value else None


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        emp_code=r["emp_code"],
        work_date=r["work_date"],
        check_in=r["check_in"],
        check_out=r.get("check_out"),
        hours_worked=as_float(r.get("hours_worked")),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        punch_count=int(r.get("punch_count") or 0),
        last_biotime_id=int(r["last_biotime_id"]) if r.get("last_biotime_id") is not None else None,
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        arrival_status=_enum_or_none(ArrivalStatus, r.get("arrival_status")),
        departure_status=_enum_or_none(DepartureStatus, r.get("departure_status")),
        early_minutes=int(r.get("early_minutes") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        grace_minutes_used=int(r.get("grace_minutes_used") or 0),
        early_departure_minutes=int(r.get("early_departure_minutes") or 0),
        late_departure_minutes=int(r.get("late_departure_minutes") or 0),
        deduction_minutes=int(r.get("deduction_minutes") or 0),
        lateness_tier=_enum_or_none(LatenessTier, r.get("lateness_tier")),
        expected_arrival=r.get("expected_arrival"),
        expected_departure=r.get("expected_departure"),
        timing_processed_at=r.get("timing_processed_at"),
        adjusted_hours=as_float(r["adjusted_hours"]) if r.get("adjusted_hours") is not None else None,
        estimated_checkout=r.get("estimated_checkout"),
        adjustment_reason=r.get("adjustment_reason"),
        adjusted_at=r.get("adjusted_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, emp_code: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE emp_code=%s AND work_date=%s",
                (emp_code, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_session(self, *, emp_code: str, work_date: date, session: DailySession) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records(
                    emp_code, work_date, check_in, check_out, hours_worked, status, notes,
                    punch_count, last_biotime_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in=VALUES(check_in),
                    check_out=VALUES(check_out),
                    hours_worked=VALUES(hours_worked),
                    status=VALUES(status),
                    notes=VALUES(notes),
                    punch_count=VALUES(punch_count),
                    last_biotime_id=VALUES(last_biotime_id),
                    {_REWRITE_RESET_SQL}
                """,
                (
                    emp_code,
                    work_date,
                    session.check_in,
                    session.check_out,
                    round(session.hours_worked, 2),
                    session.status.value,
                    session.notes,
                    session.punch_count,
                    session.last_biotime_id,
                ),
            )

            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT attendance_id FROM attendance_records WHERE emp_code=%s AND work_date=%s",
                (emp_code, work_date),
            )
            r = fetchone(cur)
            return int(r["attendance_id"]) if r else 0

    def list_range(self, *, start: date, end: date, emp_code: Optional[str] = None) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if emp_code is not None:
            clauses.append("emp_code=%s")
            params.append(emp_code)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date ASC, emp_code ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_classification(
        self,
        *,
        start: date,
        end: date,
        after_id: int,
        limit: int,
        include_processed: bool = False,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s", "attendance_id > %s"]
        if not include_processed:
            clauses.append("timing_processed_at IS NULL")

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY attendance_id ASC LIMIT %s",
                (start, end, int(after_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save_timing(self, *, attendance_id: int, timing: TimingResult, processed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET shift_id=%s, arrival_status=%s, departure_status=%s,
                    early_minutes=%s, late_minutes=%s, grace_minutes_used=%s,
                    early_departure_minutes=%s, late_departure_minutes=%s,
                    deduction_minutes=%s, lateness_tier=%s,
                    expected_arrival=%s, expected_departure=%s, timing_processed_at=%s
                WHERE attendance_id=%s
                """,
                (
                    timing.shift_id,
                    timing.arrival_status.value,
                    timing.departure_status.value,
                    timing.early_minutes,
                    timing.late_minutes,
                    timing.grace_minutes_used,
                    timing.early_departure_minutes,
                    timing.late_departure_minutes,
                    timing.deduction_minutes,
                    timing.lateness_tier.value,
                    timing.expected_arrival,
                    timing.expected_departure,
                    processed_at,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def list_unadjusted(self, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s AND adjusted_at IS NULL AND status <> %s
                ORDER BY work_date ASC, emp_code ASC
                """,
                (start, end, AttendanceStatus.AUTO_PUNCHOUT.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save_adjustment(
        self,
        *,
        attendance_id: int,
        adjusted_hours: float,
        estimated_checkout: Optional[datetime],
        adjustment_reason: str,
        notes: str,
        adjusted_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET adjusted_hours=%s, estimated_checkout=%s, adjustment_reason=%s, notes=%s, adjusted_at=%s
                WHERE attendance_id=%s
                """,
                (round(adjusted_hours, 2), estimated_checkout, adjustment_reason[:255], notes, adjusted_at, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_open_before(self, cutoff: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE check_out IS NULL AND check_in <= %s AND status <> %s
                ORDER BY check_in ASC
                """,
                (cutoff, AttendanceStatus.AUTO_PUNCHOUT.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def apply_auto_punchout(
        self,
        *,
        attendance_id: int,
        check_out: datetime,
        adjusted_hours: float,
        notes: str,
        adjusted_at: datetime,
        status: AttendanceStatus = AttendanceStatus.AUTO_PUNCHOUT,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out=%s, status=%s, adjusted_hours=%s, estimated_checkout=%s,
                    adjustment_reason=%s, notes=%s, adjusted_at=%s
                WHERE attendance_id=%s AND check_out IS NULL
                """,
                (
                    check_out,
                    status.value,
                    round(adjusted_hours, 2),
                    check_out,
                    "Auto punch-out: missing punch-out",
                    notes,
                    adjusted_at,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        emp_code: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if emp_code is not None:
            clauses.append("ar.emp_code=%s")
            params.append(emp_code)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.emp_code, COALESCE(e.full_name, ar.emp_code) AS full_name, e.department,
                    s.shift_name, COALESCE(s.break_minutes, 0) AS break_minutes,
                    ar.work_date, ar.check_in, ar.check_out, ar.hours_worked, ar.adjusted_hours,
                    ar.status, ar.arrival_status, ar.deduction_minutes, ar.notes
                FROM attendance_records ar
                LEFT JOIN employees e ON e.emp_code = ar.emp_code
                LEFT JOIN shift_assignments sa ON sa.emp_code = ar.emp_code AND sa.work_date = ar.work_date
                LEFT JOIN shifts s ON s.shift_id = COALESCE(sa.shift_id, e.shift_id)
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.emp_code ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    emp_code=r["emp_code"],
                    full_name=r["full_name"],
                    department=r.get("department"),
                    shift_name=r.get("shift_name"),
                    break_minutes=int(r.get("break_minutes") or 0),
                    work_date=r["work_date"],
                    check_in=r["check_in"],
                    check_out=r.get("check_out"),
                    hours_worked=as_float(r.get("hours_worked")),
                    adjusted_hours=as_float(r["adjusted_hours"]) if r.get("adjusted_hours") is not None else None,
                    status=AttendanceStatus(r["status"]),
                    arrival_status=_enum_or_none(ArrivalStatus, r.get("arrival_status")),
                    deduction_minutes=int(r.get("deduction_minutes") or 0),
                    notes=r.get("notes"),
                )
                for r in rows
            ]
