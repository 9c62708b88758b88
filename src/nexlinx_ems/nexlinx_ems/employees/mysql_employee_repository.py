from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, emp_code, full_name, department, cnic, shift_id, is_active, non_bio"


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        emp_code=r["emp_code"],
        full_name=r["full_name"],
        department=r.get("department"),
        cnic=r.get("cnic"),
        shift_id=int(r["shift_id"]) if r.get("shift_id") else None,
        is_active=bool(r.get("is_active", 1)),
        non_bio=bool(r.get("non_bio", 0)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_code(self, emp_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE emp_code=%s", (emp_code,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE is_active=1 ORDER BY emp_code")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_cnic_rows(self) -> Sequence[tuple[str, str]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT emp_code, cnic FROM employees WHERE cnic IS NOT NULL AND cnic <> ''")
            return [(r["emp_code"], r["cnic"]) for r in fetchall(cur)]
