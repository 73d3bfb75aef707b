"""
filter_service.py - Filter helpers and presets
Single responsibility: build TicketFilter from raw UI values and keep the
last-used one per admin.
"""
from support_console.config import LIST_LIMIT
from support_console.database.repositories import filter_presets as preset_repo
from support_console.domain.filters import TicketFilter
from support_console.domain.models import PRIORITIES, STATUSES


def build_filter(status: str = "", priority: str = "", keyword: str = "", limit: int = LIST_LIMIT) -> TicketFilter:
    # Unknown values fall back to "all" rather than an empty result
    status = status if status in STATUSES else ""
    priority = priority if priority in PRIORITIES else ""
    return TicketFilter(
        status=status,
        priority=priority,
        keyword=(keyword or "").strip(),
        limit=limit if limit and limit > 0 else LIST_LIMIT,
    )


# Last-used preset, one row per admin in the shared database


def save_last(owner: str, filter: TicketFilter) -> None:
    preset_repo.save_last(owner, filter.status, filter.priority, filter.keyword)


def load_last(owner: str, default: TicketFilter | None = None) -> TicketFilter:
    row = preset_repo.get_last(owner)
    if row is None:
        return default or TicketFilter()
    # Stored values pass through the same normalization as UI input
    return build_filter(status=row["status"], priority=row["priority"], keyword=row["keyword"])
