"""
filters.py - Filter DTOs
Single responsibility: carry filter inputs for ticket list queries.
"""
from dataclasses import dataclass

from support_console.config import LIST_LIMIT


@dataclass(frozen=True)
class TicketFilter:
    status: str = ""  # "" = all statuses
    priority: str = ""  # "" = all priorities
    keyword: str = ""
    limit: int = LIST_LIMIT
