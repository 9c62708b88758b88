"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Shift defaults (used when an employee has neither a schedule nor a shift)
DEFAULT_SHIFT_NAME = "Default"
DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_SHIFT_END = time(17, 0)
DEFAULT_GRACE_MINUTES = 30
DEPARTURE_ON_TIME_MINUTES = 30

# Session limits
MAX_SESSION_HOURS = 12
STANDARD_DAY_HOURS = 8
MAX_OVERTIME_HOURS = 3
MAX_WORKING_HOURS = 16

# Auto punch-out
AUTO_PUNCHOUT_THRESHOLD_HOURS = 12
MISSED_PUNCH_PENALTY_HOURS = 1

# Lateness tiers (minutes past shift start)
MINOR_LATE_MIN_MINUTES = 31
MINOR_LATE_MAX_MINUTES = 60
SIGNIFICANT_LATE_MAX_MINUTES = 120

# BioTime API
BIOTIME_PAGE_SIZE = 10000
BIOTIME_TOKEN_TTL_HOURS = 23
BIOTIME_TIMEOUT_SECONDS = 30
BIOTIME_MAX_RETRIES = 3
BIOTIME_BACKOFF_SECONDS = 2.0
BIOTIME_PAGE_DELAY_SECONDS = 0.1
BIOTIME_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ACCESS_CONTROL_MARKER = "lock"

# Polling / gap recovery
POLL_OVERLAP_MINUTES = 5
INITIAL_LOOKBACK_HOURS = 24
SPARSE_DAY_THRESHOLD = 50
GAP_SCAN_DAYS = 7

# Batch sizes
NORMALIZER_BATCH_SIZE = 1000
CLASSIFIER_BATCH_SIZE = 100
CLASSIFIER_LOOKBACK_DAYS = 90

# Two punches closer than this are the same tap, not a session
DUPLICATE_TAP_MINUTES = 10

DEFAULT_REPORT_DAYS = 7
