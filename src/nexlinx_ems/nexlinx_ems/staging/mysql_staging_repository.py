from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..biotime.model import RawPunch
from ..database.connection import DatabaseConnection
from ..database.mysql_base import chunked, db_cursor, fetchall, fetchone, placeholders
from .model import DuplicateGroup, StagedPunch
from .repository import StagingRepository

_COLUMNS = (
    "staging_id, biotime_id, emp_code, punch_time, punch_state, terminal_alias, "
    "is_access_control, pulled_at, processed_at, process_error"
)
_CHUNK = 500


def _to_punch(r: dict) -> StagedPunch:
    return StagedPunch(
        staging_id=int(r["staging_id"]),
        biotime_id=int(r["biotime_id"]) if r.get("biotime_id") is not None else None,
        emp_code=r["emp_code"],
        punch_time=r["punch_time"],
        punch_state=r.get("punch_state"),
        terminal_alias=r.get("terminal_alias"),
        is_access_control=bool(r.get("is_access_control")),
        pulled_at=r.get("pulled_at"),
        processed_at=r.get("processed_at"),
        process_error=r.get("process_error"),
    )


class MySQLStagingRepository(StagingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_punches(self, punches: Sequence[RawPunch], *, pulled_at: datetime) -> int:
        if not punches:
            return 0

        rows = [
            (
                p.biotime_id,
                p.emp_code,
                p.punch_time,
                p.punch_state,
                p.terminal_sn,
                p.terminal_alias,
                p.verify_type,
                p.area_alias,
                1 if p.is_access_control else 0,
                json.dumps(p.raw, default=str),
                pulled_at,
            )
            for p in punches
        ]

        inserted = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for chunk in chunked(rows, _CHUNK):
                cur.executemany(
                    """
                    INSERT IGNORE INTO biotime_punches(
                        biotime_id, emp_code, punch_time, punch_state, terminal_sn, terminal_alias,
                        verify_type, area_alias, is_access_control, all_fields, pulled_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    chunk,
                )
                inserted += max(cur.rowcount, 0)
        return inserted

    def last_punch_time(self) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(punch_time) AS last_time FROM biotime_punches")
            r = fetchone(cur)
            return r["last_time"] if r else None

    def max_biotime_id(self) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(biotime_id) AS max_id FROM biotime_punches")
            r = fetchone(cur)
            return int(r["max_id"]) if r and r["max_id"] is not None else None

    def biotime_ids_since(self, since_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT biotime_id FROM biotime_punches WHERE biotime_id >= %s ORDER BY biotime_id",
                (int(since_id),),
            )
            return [int(r["biotime_id"]) for r in fetchall(cur)]

    def min_biotime_id_since(self, since: datetime) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MIN(biotime_id) AS min_id FROM biotime_punches WHERE punch_time >= %s", (since,))
            r = fetchone(cur)
            return int(r["min_id"]) if r and r["min_id"] is not None else None

    def counts_by_day(self, *, start: date, end: date) -> dict[date, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DATE(punch_time) AS day, COUNT(*) AS total
                FROM biotime_punches
                WHERE punch_time >= %s AND punch_time < DATE_ADD(%s, INTERVAL 1 DAY)
                GROUP BY DATE(punch_time)
                """,
                (start, end),
            )
            return {r["day"]: int(r["total"]) for r in fetchall(cur)}

    def list_unprocessed(self, limit: int) -> Sequence[StagedPunch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM biotime_punches
                WHERE processed_at IS NULL
                ORDER BY biotime_id ASC, staging_id ASC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def list_for_employee_between(self, *, emp_code: str, start: datetime, end: datetime) -> Sequence[StagedPunch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM biotime_punches
                WHERE emp_code=%s AND punch_time >= %s AND punch_time < %s
                ORDER BY punch_time ASC, staging_id ASC
                """,
                (emp_code, start, end),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def mark_processed(self, staging_ids: Sequence[int], *, processed_at: datetime, error: Optional[str] = None) -> int:
        if not staging_ids:
            return 0

        updated = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for chunk in chunked(list(staging_ids), _CHUNK):
                cur.execute(
                    f"""
                    UPDATE biotime_punches
                    SET processed_at=%s, process_error=%s
                    WHERE staging_id IN ({placeholders(chunk)})
                    """,
                    (processed_at, error, *chunk),
                )
                updated += cur.rowcount
        return updated

    def find_duplicate_groups(self) -> Sequence[DuplicateGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT emp_code, punch_time, punch_state,
                       GROUP_CONCAT(staging_id ORDER BY staging_id) AS ids
                FROM biotime_punches
                GROUP BY emp_code, punch_time, punch_state
                HAVING COUNT(*) > 1
                """
            )
            return [
                DuplicateGroup(
                    emp_code=r["emp_code"],
                    punch_time=r["punch_time"],
                    punch_state=r.get("punch_state"),
                    staging_ids=tuple(int(x) for x in str(r["ids"]).split(",")),
                )
                for r in fetchall(cur)
            ]

    def delete_by_ids(self, staging_ids: Sequence[int]) -> int:
        if not staging_ids:
            return 0

        deleted = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for chunk in chunked(list(staging_ids), _CHUNK):
                cur.execute(f"DELETE FROM biotime_punches WHERE staging_id IN ({placeholders(chunk)})", tuple(chunk))
                deleted += cur.rowcount
        return deleted
