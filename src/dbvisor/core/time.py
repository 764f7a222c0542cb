from __future__ import annotations

from datetime import datetime, timezone

SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_utc_timestamp() -> str:
    """UTC now in the same text form as SQLite's CURRENT_TIMESTAMP."""
    return datetime.now(timezone.utc).strftime(SQLITE_TIMESTAMP_FORMAT)
