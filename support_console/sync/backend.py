"""
backend.py - Ticket backend contract
Single responsibility: the async operations the sync engine consumes.
"""
from typing import Protocol

from support_console.domain.filters import TicketFilter
from support_console.domain.models import Ticket


class TicketBackend(Protocol):
    async def list_tickets(self, filter: TicketFilter) -> list[Ticket]: ...

    async def get_ticket(self, ticket_id: int) -> Ticket: ...

    async def mark_read(self, ticket_id: int, role: str) -> None: ...

    async def post_reply(self, ticket_id: int, text: str, sender_name: str) -> Ticket: ...

    async def update_ticket(self, ticket_id: int, **fields) -> Ticket: ...

    async def assign_ticket(self, ticket_id: int, assignee: str | None) -> Ticket: ...

    async def add_note(self, ticket_id: int, body: str, author: str) -> Ticket: ...
