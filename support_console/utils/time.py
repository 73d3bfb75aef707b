"""
time.py - time utilities
Single responsibility: common time helpers.
"""
from datetime import datetime, timezone


def now_iso() -> str:
    # Microseconds keep read receipts and messages in the same second ordered.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_iso(value) -> datetime | None:
    """ISO 8601 文字列を aware datetime に変換する。失敗時は None。"""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
