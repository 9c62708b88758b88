from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Schedule
from .repository import ScheduleRepository


def _to_schedule(r: dict) -> Schedule:
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        emp_code=r["emp_code"],
        work_date=r["work_date"],
        shift_id=int(r["shift_id"]),
        note=r.get("note"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, emp_code: str, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, emp_code, work_date, shift_id, note
                FROM shift_assignments
                WHERE emp_code=%s AND work_date=%s
                """,
                (emp_code, work_date),
            )
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def upsert(self, *, emp_code: str, work_date: date, shift_id: int, note: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_assignments(emp_code, work_date, shift_id, note)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE shift_id=VALUES(shift_id), note=VALUES(note)
                """,
                (emp_code, work_date, int(shift_id), note),
            )

            # If it was an update, lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM shift_assignments WHERE emp_code=%s AND work_date=%s",
                (emp_code, work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_assignments WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, emp_code: Optional[str] = None) -> Sequence[Schedule]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if emp_code is not None:
            clauses.append("emp_code=%s")
            params.append(emp_code)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT schedule_id, emp_code, work_date, shift_id, note
                FROM shift_assignments
                WHERE {where}
                ORDER BY work_date ASC, emp_code ASC
                """,
                tuple(params),
            )
            return [_to_schedule(r) for r in fetchall(cur)]
