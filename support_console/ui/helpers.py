"""
helpers.py - UI helper functions
Single responsibility: small formatting helpers used across UI.
"""
from support_console.config import COLOR_PRIORITY, COLOR_STATUS, COLOR_TEXT_MUTED
from support_console.utils.time import parse_iso

STATUS_LABELS = {
    "open": "未対応",
    "in_progress": "対応中",
    "resolved": "解決済み",
    "closed": "クローズ",
}

PRIORITY_LABELS = {
    "low": "低",
    "medium": "中",
    "high": "高",
    "urgent": "緊急",
}


def format_datetime(iso_str: str | None) -> str:
    """ISO 8601 string to local "YYYY-MM-DD HH:MM"; fallback to raw on error."""
    dt = parse_iso(iso_str)
    if dt is None:
        return iso_str or ""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def priority_label(priority: str) -> str:
    return PRIORITY_LABELS.get(priority, priority)


def status_color(status: str) -> str:
    return COLOR_STATUS.get(status, COLOR_TEXT_MUTED)


def priority_color(priority: str) -> str:
    return COLOR_PRIORITY.get(priority, COLOR_TEXT_MUTED)


def initial(name: str | None) -> str:
    return name[0].upper() if name else "?"
