"""Timestamp helpers shared by capture, reporting and run ids."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T00:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_stamp(timestamp: str) -> str:
    """Make an ISO timestamp safe for use inside a file name."""
    return timestamp.replace(":", "-").replace(".", "-")


def new_run_id() -> str:
    """Time-based run identifier: ``report-<epoch milliseconds>``."""
    return f"report-{int(time.time() * 1000)}"
