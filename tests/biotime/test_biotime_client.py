from __future__ import annotations

from datetime import datetime

import pytest
import requests

from src.nexlinx_ems.nexlinx_ems.biotime.client import BioTimeClient
from src.nexlinx_ems.nexlinx_ems.biotime.config import BioTimeConfig
from src.nexlinx_ems.nexlinx_ems.core.exceptions import BioTimeAuthError, BioTimeError


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self._body = body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """Replays queued responses; auth calls always succeed unless told otherwise."""

    def __init__(self, responses=None, *, token: str = "tok-1"):
        self.responses = list(responses or [])
        self.token = token
        self.calls: list[dict] = []

    def request(self, method, url, *, params=None, json=None, headers=None, timeout=None, verify=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        if url.endswith("jwt-api-token-auth/"):
            return FakeResponse(200, {"token": self.token})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def data_calls(self) -> list[dict]:
        return [c for c in self.calls if "transactions" in c["url"]]


def make_client(session, **overrides) -> tuple[BioTimeClient, list[float]]:
    values = {"base_url": "http://bio.local", "username": "api", "password": "secret", "page_size": 2}
    values.update(overrides)
    sleeps: list[float] = []
    client = BioTimeClient(
        BioTimeConfig.from_dict(values),
        session=session,
        sleep=sleeps.append,
        clock=lambda: datetime(2025, 3, 10, 12, 0, 0),
    )
    return client, sleeps


def test_base_url_gets_trailing_slash():
    assert BioTimeConfig.from_dict({"base_url": "http://bio.local"}).base_url == "http://bio.local/"


def test_unconfigured_client_refuses_to_authenticate():
    client, _ = make_client(FakeSession(), password="")
    with pytest.raises(BioTimeAuthError):
        client.authenticate()


def test_transactions_are_paged_with_jwt_header():
    session = FakeSession(
        [
            FakeResponse(200, {"data": [{"id": 1}, {"id": 2}], "next": "page2"}),
            FakeResponse(200, {"data": [{"id": 3}], "next": None}),
        ]
    )
    client, sleeps = make_client(session)

    rows = client.fetch_transactions(datetime(2025, 3, 10, 0, 0), datetime(2025, 3, 10, 12, 0))

    assert [r["id"] for r in rows] == [1, 2, 3]
    calls = session.data_calls()
    assert [c["params"]["page"] for c in calls] == [1, 2]
    assert calls[0]["params"]["punch_time__gte"] == "2025-03-10 00:00:00"
    assert calls[0]["params"]["page_size"] == 2
    assert calls[0]["headers"]["Authorization"] == "JWT tok-1"
    assert sleeps == [0.1]


def test_token_is_reused_until_expiry():
    session = FakeSession(
        [FakeResponse(200, {"data": []}), FakeResponse(200, {"data": []})]
    )
    client, _ = make_client(session)

    client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))
    client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))

    auth_calls = [c for c in session.calls if c["url"].endswith("jwt-api-token-auth/")]
    assert len(auth_calls) == 1
    assert client.status()["authenticated"] is True


def test_retries_transient_failures_with_backoff():
    session = FakeSession(
        [
            requests.ConnectionError("down"),
            FakeResponse(503),
            FakeResponse(200, {"data": [{"id": 9}]}),
        ]
    )
    client, sleeps = make_client(session)

    rows = client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))

    assert rows == [{"id": 9}]
    assert sleeps == [2.0, 4.0]


def test_gives_up_after_max_retries():
    session = FakeSession([FakeResponse(500)] * 4)
    client, sleeps = make_client(session)

    with pytest.raises(BioTimeError):
        client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))
    assert len(session.data_calls()) == 4
    assert sleeps == [2.0, 4.0, 8.0]


def test_reauthenticates_once_on_401():
    session = FakeSession([FakeResponse(401), FakeResponse(200, {"data": [{"id": 5}]})])
    client, sleeps = make_client(session)

    rows = client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))

    assert rows == [{"id": 5}]
    auth_calls = [c for c in session.calls if c["url"].endswith("jwt-api-token-auth/")]
    assert len(auth_calls) == 2
    assert sleeps == []


def test_client_error_is_not_retried():
    session = FakeSession([FakeResponse(400)])
    client, sleeps = make_client(session)

    with pytest.raises(BioTimeError):
        client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))
    assert sleeps == []


def test_invalid_json_raises_biotime_error():
    session = FakeSession([FakeResponse(200, ValueError("not json"))])
    client, _ = make_client(session)

    with pytest.raises(BioTimeError):
        client.fetch_transactions(datetime(2025, 3, 10), datetime(2025, 3, 10, 1))
