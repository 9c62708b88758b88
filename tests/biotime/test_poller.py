from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.nexlinx_ems.nexlinx_ems.biotime.poller import BiometricPoller
from src.nexlinx_ems.nexlinx_ems.core.exceptions import ValidationError
from tests.fakes import InMemoryStaging


class FakeClient:
    def __init__(self, pages):
        self.pages = pages
        self.windows: list[tuple] = []

    def iter_transaction_pages(self, start, end):
        self.windows.append((start, end))
        return iter(self.pages)

    def iter_transaction_pages_by_id(self, start_id, end_id):
        self.windows.append((start_id, end_id))
        return iter(self.pages)


def _row(biotime_id, emp_code="1001", punch_time="2025-03-10 09:00:00", state="0", alias="Main Gate"):
    return {
        "id": biotime_id,
        "emp_code": emp_code,
        "punch_time": punch_time,
        "punch_state": state,
        "terminal_sn": "SN1",
        "terminal_alias": alias,
    }


def test_first_poll_uses_initial_lookback(fixed_now):
    client = FakeClient([])
    poller = BiometricPoller(client, InMemoryStaging(), initial_lookback_hours=24)

    poller.poll(now=fixed_now)

    assert client.windows == [(fixed_now - timedelta(hours=24), fixed_now)]


def test_poll_overlaps_last_staged_punch(fixed_now):
    staging = InMemoryStaging()
    staging.add("1001", datetime(2025, 3, 10, 11, 0))
    client = FakeClient([])
    poller = BiometricPoller(client, staging, overlap_minutes=5)

    poller.poll(now=fixed_now)

    assert client.windows == [(datetime(2025, 3, 10, 10, 55), fixed_now)]


def test_poll_with_terminal_clock_ahead_still_reads_recent_past(fixed_now):
    staging = InMemoryStaging()
    staging.add("1001", fixed_now + timedelta(hours=1))
    client = FakeClient([])
    poller = BiometricPoller(client, staging, overlap_minutes=5)

    poller.poll(now=fixed_now)

    assert client.windows == [(fixed_now - timedelta(minutes=5), fixed_now)]


def test_stages_rows_and_counts_duplicates_rejects_and_locks(fixed_now):
    staging = InMemoryStaging()
    pages = [
        [_row(1), _row(2, alias="Server Room Lock"), _row(3, emp_code="")],
        [_row(1), _row(4, punch_time="bad")],
    ]
    poller = BiometricPoller(FakeClient(pages), staging)

    result = poller.pull_range(datetime(2025, 3, 10), fixed_now, now=fixed_now)

    assert result.fetched == 5
    assert result.inserted == 2
    assert result.duplicates == 1
    assert result.rejected == 2
    assert result.access_control == 1
    assert len(staging.rows) == 2
    assert any(r.is_access_control for r in staging.rows.values())


def test_inverted_window_is_rejected(fixed_now):
    poller = BiometricPoller(FakeClient([]), InMemoryStaging())
    with pytest.raises(ValidationError):
        poller.pull_range(fixed_now, fixed_now - timedelta(minutes=1))


def test_pull_id_range_reports_ids(fixed_now):
    poller = BiometricPoller(FakeClient([[_row(7)]]), InMemoryStaging())

    result = poller.pull_id_range(7, 9, now=fixed_now)

    assert (result.start_id, result.end_id, result.inserted) == (7, 9, 1)
