from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Iterator, Optional
from urllib.parse import urljoin

import requests

from ..common.datetime_utils import format_biotime, now_local
from ..core.exceptions import BioTimeAuthError, BioTimeError
from .config import BioTimeConfig

logger = logging.getLogger(__name__)

AUTH_PATH = "jwt-api-token-auth/"
TRANSACTIONS_PATH = "iclock/api/transactions/"

# Worth another attempt; everything else in 4xx is our fault.
RETRY_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class BioTimeClient:
    """HTTP client for the BioTime (ZKBioTime) REST API.

    Authenticates with a JWT that is cached for token_ttl_hours, re-authenticates
    once on HTTP 401, and retries transient failures with exponential backoff.
    """

    def __init__(
        self,
        config: BioTimeConfig,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = now_local,
    ):
        self._config = config
        self._session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    @property
    def config(self) -> BioTimeConfig:
        return self._config

    def authenticate(self) -> str:
        if not self._config.is_configured:
            raise BioTimeAuthError("BioTime URL/username/password are not configured")

        logger.info("Authenticating with BioTime at %s", self._config.base_url)
        try:
            body = self._request(
                "POST",
                AUTH_PATH,
                payload={"username": self._config.username, "password": self._config.password},
                authenticated=False,
            )
        except BioTimeError as exc:
            raise BioTimeAuthError(f"BioTime authentication failed: {exc}") from exc

        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise BioTimeAuthError("BioTime authentication response had no token")

        self._token = str(token)
        self._token_expires_at = self._clock() + timedelta(hours=self._config.token_ttl_hours)
        return self._token

    def _ensure_token(self) -> str:
        if not self._token or not self._token_expires_at or self._token_expires_at <= self._clock():
            return self.authenticate()
        return self._token

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        payload: Optional[dict] = None,
        authenticated: bool = True,
    ) -> Any:
        url = urljoin(self._config.base_url, path)
        attempts = self._config.max_retries + 1
        reauthenticated = False
        last_error: Optional[Exception] = None

        attempt = 0
        while attempt < attempts:
            headers = {"Content-Type": "application/json"}
            if authenticated:
                headers["Authorization"] = f"JWT {self._ensure_token()}"

            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    headers=headers,
                    timeout=self._config.timeout,
                    verify=self._config.verify_ssl,
                )
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = exc
            else:
                if response.status_code == 401 and authenticated and not reauthenticated:
                    logger.info("BioTime rejected the cached token; re-authenticating")
                    self._token = None
                    reauthenticated = True
                    continue

                if response.status_code in RETRY_STATUS_CODES:
                    last_error = BioTimeError(f"HTTP {response.status_code} from {path}")
                else:
                    try:
                        response.raise_for_status()
                    except requests.HTTPError as exc:
                        raise BioTimeError(f"BioTime request {method} {path} failed: {exc}") from exc
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise BioTimeError(f"BioTime returned invalid JSON for {path}") from exc

            attempt += 1
            if attempt < attempts:
                delay = self._config.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "BioTime %s %s failed (attempt %s/%s): %s; retrying in %.1fs",
                    method, path, attempt, attempts, last_error, delay,
                )
                self._sleep(delay)

        logger.error("BioTime %s %s failed after %s attempts: %s", method, path, attempts, last_error)
        raise BioTimeError(f"BioTime request {method} {path} failed after {attempts} attempts") from last_error

    def _iter_pages(self, params: dict) -> Iterator[list[dict]]:
        page_size = self._config.page_size
        page = 1
        while True:
            body = self._request("GET", TRANSACTIONS_PATH, params={**params, "page": page, "page_size": page_size}) or {}
            data = list(body.get("data") or [])
            logger.debug("BioTime page %s: %s rows", page, len(data))
            if data:
                yield data

            if len(data) < page_size or ("next" in body and not body["next"]):
                return

            page += 1
            if self._config.page_delay_seconds:
                self._sleep(self._config.page_delay_seconds)

    def iter_transaction_pages(self, start: datetime, end: datetime) -> Iterator[list[dict]]:
        """Transactions with start <= punch_time <= end, one list per API page."""
        return self._iter_pages(
            {"punch_time__gte": format_biotime(start), "punch_time__lte": format_biotime(end)}
        )

    def iter_transaction_pages_by_id(self, start_id: int, end_id: int) -> Iterator[list[dict]]:
        return self._iter_pages({"id__gte": int(start_id), "id__lte": int(end_id)})

    def fetch_transactions(self, start: datetime, end: datetime) -> list[dict]:
        return [row for page in self.iter_transaction_pages(start, end) for row in page]

    def status(self) -> dict:
        now = self._clock()
        return {
            "base_url": self._config.base_url,
            "configured": self._config.is_configured,
            "authenticated": bool(self._token and self._token_expires_at and self._token_expires_at > now),
            "token_expires_at": self._token_expires_at.isoformat() if self._token_expires_at else None,
        }
