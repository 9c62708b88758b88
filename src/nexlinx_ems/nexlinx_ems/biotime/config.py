from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import (
    BIOTIME_BACKOFF_SECONDS,
    BIOTIME_MAX_RETRIES,
    BIOTIME_PAGE_DELAY_SECONDS,
    BIOTIME_PAGE_SIZE,
    BIOTIME_TIMEOUT_SECONDS,
    BIOTIME_TOKEN_TTL_HOURS,
)


@dataclass(frozen=True)
class BioTimeConfig:
    base_url: str
    username: str
    password: str
    timeout: float = BIOTIME_TIMEOUT_SECONDS
    page_size: int = BIOTIME_PAGE_SIZE
    max_retries: int = BIOTIME_MAX_RETRIES
    backoff_seconds: float = BIOTIME_BACKOFF_SECONDS
    page_delay_seconds: float = BIOTIME_PAGE_DELAY_SECONDS
    token_ttl_hours: int = BIOTIME_TOKEN_TTL_HOURS
    verify_ssl: bool = True

    @classmethod
    def from_dict(cls, values: dict) -> "BioTimeConfig":
        base_url = str(values.get("base_url") or "").strip()
        if base_url and not base_url.endswith("/"):
            base_url += "/"
        return cls(
            base_url=base_url,
            username=str(values.get("username") or ""),
            password=str(values.get("password") or ""),
            timeout=float(values.get("timeout", BIOTIME_TIMEOUT_SECONDS)),
            page_size=int(values.get("page_size", BIOTIME_PAGE_SIZE)),
            max_retries=int(values.get("max_retries", BIOTIME_MAX_RETRIES)),
            backoff_seconds=float(values.get("backoff_seconds", BIOTIME_BACKOFF_SECONDS)),
            page_delay_seconds=float(values.get("page_delay_seconds", BIOTIME_PAGE_DELAY_SECONDS)),
            token_ttl_hours=int(values.get("token_ttl_hours", BIOTIME_TOKEN_TTL_HOURS)),
            verify_ssl=bool(values.get("verify_ssl", True)),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.username and self.password)
