import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def biotime_config_from_env() -> dict:
    return {
        "base_url": os.getenv("BIOTIME_API_URL", ""),
        "username": os.getenv("BIOTIME_USERNAME", ""),
        "password": os.getenv("BIOTIME_PASSWORD", ""),
        "timeout": float(os.getenv("BIOTIME_TIMEOUT", "30")),
        "page_size": int(os.getenv("BIOTIME_PAGE_SIZE", "10000")),
        "max_retries": int(os.getenv("BIOTIME_MAX_RETRIES", "3")),
        "backoff_seconds": float(os.getenv("BIOTIME_BACKOFF_SECONDS", "2")),
        "verify_ssl": env_flag("BIOTIME_VERIFY_SSL", "1"),
    }


def pipeline_config_from_env() -> dict:
    return {
        "grace_minutes": int(os.getenv("GRACE_MINUTES", "30")),
        "max_session_hours": int(os.getenv("MAX_SESSION_HOURS", "12")),
        "max_overtime_hours": int(os.getenv("MAX_OVERTIME_HOURS", "3")),
        "auto_punchout_threshold_hours": int(os.getenv("AUTO_PUNCHOUT_THRESHOLD_HOURS", "12")),
        "sparse_day_threshold": int(os.getenv("SPARSE_DAY_THRESHOLD", "50")),
        "poll_interval_minutes": int(os.getenv("POLL_INTERVAL_MINUTES", "5")),
        "gap_fill_interval_minutes": int(os.getenv("GAP_FILL_INTERVAL_MINUTES", "60")),
    }
