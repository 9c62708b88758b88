import re
from dataclasses import fields
from datetime import date, datetime

from src.nexlinx_ems.nexlinx_ems.attendance.model import DailySession
from src.nexlinx_ems.nexlinx_ems.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.nexlinx_ems.nexlinx_ems.core.enums import AttendanceStatus
from src.nexlinx_ems.nexlinx_ems.timing.model import TimingResult


class RecordingCursor:
    def __init__(self):
        self.statements = []
        self.lastrowid = 7
        self.rowcount = 1

    def execute(self, sql, params=None):
        self.statements.append((sql, params))

    def fetchone(self):
        return None

    def close(self):
        pass


class RecordingConnection:
    def __init__(self):
        self.cur = RecordingCursor()
        self.committed = False

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self):
        self.conn = RecordingConnection()

    def connect(self):
        return self.conn


def _rewrite_sql():
    factory = RecordingFactory()
    session = DailySession(
        check_in=datetime(2025, 3, 10, 9, 40),
        check_out=datetime(2025, 3, 10, 18, 0),
        hours_worked=8.33,
        status=AttendanceStatus.COMPLETE,
        notes="Processed 2 punches: 1 in, 1 out",
        punch_count=2,
    )

    attendance_id = MySQLAttendanceRepository(factory).upsert_session(
        emp_code="1001", work_date=date(2025, 3, 10), session=session
    )

    assert attendance_id == 7
    assert factory.conn.committed
    sql = factory.conn.cur.statements[0][0]
    return sql.split("ON DUPLICATE KEY UPDATE", 1)[1]


def test_rewrite_clears_every_timing_column():
    update_clause = _rewrite_sql()

    for f in fields(TimingResult):
        assert re.search(rf"\b{f.name}=(NULL|0)\b", update_clause), f.name
    assert re.search(r"\btiming_processed_at=NULL\b", update_clause)


def test_rewrite_clears_overbilling_adjustment():
    update_clause = _rewrite_sql()

    for column in ("adjusted_hours", "estimated_checkout", "adjustment_reason", "adjusted_at"):
        assert re.search(rf"\b{column}=NULL\b", update_clause), column
