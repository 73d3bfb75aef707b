"""
ticket_service.py - Ticket service layer
Single responsibility: orchestrate ticket operations and enforce policies.

The module-level functions are synchronous and talk to SQLite directly.
SQLiteTicketBackend exposes them as the async backend polled by the console.
"""
import asyncio

from support_console.database.repositories import messages as message_repo
from support_console.database.repositories import notes as note_repo
from support_console.database.repositories import read_receipts as receipt_repo
from support_console.database.repositories import tickets as ticket_repo
from support_console.domain.filters import TicketFilter
from support_console.domain.models import (
    PRIORITIES,
    ROLE_ADMIN,
    ROLE_USER,
    ROLES,
    STATUSES,
    Ticket,
)
from support_console.utils.time import now_iso


class TicketNotFoundError(LookupError):
    def __init__(self, ticket_id: int):
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id


def _ensure_status(status: str) -> None:
    if status not in STATUSES:
        raise ValueError(f"Unsupported status: {status}")


def _ensure_priority(priority: str) -> None:
    if priority not in PRIORITIES:
        raise ValueError(f"Unsupported priority: {priority}")


def _ensure_role(role: str) -> None:
    if role not in ROLES:
        raise ValueError(f"Unsupported role: {role}")


def _require_body(body: str) -> str:
    body = (body or "").strip()
    if not body:
        raise ValueError("Message body must not be empty")
    return body


def list_tickets(filter: TicketFilter) -> list[Ticket]:
    return ticket_repo.list_tickets(filter)


def get_ticket(ticket_id: int) -> Ticket:
    ticket = ticket_repo.get_ticket(ticket_id)
    if ticket is None:
        raise TicketNotFoundError(ticket_id)
    return ticket


def create_ticket(
    subject: str,
    description: str,
    user_id: str,
    priority: str = "medium",
    assignee: str | None = None,
) -> int:
    subject = (subject or "").strip()
    if not subject:
        raise ValueError("Subject must not be empty")
    _ensure_priority(priority)
    ticket = Ticket(
        subject=subject,
        description=(description or "").strip(),
        priority=priority,
        user_id=user_id,
        assignee=assignee or None,
        created_at=now_iso(),
        updated_at=now_iso(),
    )
    return ticket_repo.create_ticket(ticket)


def mark_read(ticket_id: int, role: str) -> None:
    _ensure_role(role)
    if not ticket_repo.exists(ticket_id):
        raise TicketNotFoundError(ticket_id)
    receipt_repo.mark_read(ticket_id, role)


def post_reply(ticket_id: int, body: str, sender_name: str) -> Ticket:
    """Append an admin message and return the refreshed ticket."""
    body = _require_body(body)
    if not ticket_repo.exists(ticket_id):
        raise TicketNotFoundError(ticket_id)
    message_repo.add_message(ticket_id, ROLE_ADMIN, sender_name, body)
    return get_ticket(ticket_id)


def post_user_message(ticket_id: int, body: str, sender_name: str) -> Ticket:
    """User-side counterpart of post_reply (used by the customer side and seeding)."""
    body = _require_body(body)
    if not ticket_repo.exists(ticket_id):
        raise TicketNotFoundError(ticket_id)
    message_repo.add_message(ticket_id, ROLE_USER, sender_name, body)
    return get_ticket(ticket_id)


def update_ticket(ticket_id: int, **fields) -> Ticket:
    if "status" in fields:
        _ensure_status(fields["status"])
    if "priority" in fields:
        _ensure_priority(fields["priority"])
    unknown = set(fields) - set(ticket_repo.UPDATABLE_COLUMNS)
    if unknown:
        raise ValueError(f"Unsupported ticket fields: {', '.join(sorted(unknown))}")
    if not ticket_repo.update_fields(ticket_id, **fields):
        raise TicketNotFoundError(ticket_id)
    return get_ticket(ticket_id)


def assign_ticket(ticket_id: int, assignee: str | None) -> Ticket:
    return update_ticket(ticket_id, assignee=(assignee or "").strip() or None)


def add_note(ticket_id: int, body: str, author: str) -> Ticket:
    body = _require_body(body)
    if not ticket_repo.exists(ticket_id):
        raise TicketNotFoundError(ticket_id)
    note_repo.add_note(ticket_id, author, body)
    return get_ticket(ticket_id)


def delete_ticket(ticket_id: int) -> None:
    # messages/notes/receipts are cascade
    ticket_repo.delete_ticket(ticket_id)


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


class SQLiteTicketBackend:
    """Ticket backend over the shared SQLite file.

    Every call runs in a worker thread so a slow network share never blocks
    the UI event loop.
    """

    async def list_tickets(self, filter: TicketFilter) -> list[Ticket]:
        return await asyncio.to_thread(list_tickets, filter)

    async def get_ticket(self, ticket_id: int) -> Ticket:
        return await asyncio.to_thread(get_ticket, ticket_id)

    async def mark_read(self, ticket_id: int, role: str) -> None:
        await asyncio.to_thread(mark_read, ticket_id, role)

    async def post_reply(self, ticket_id: int, text: str, sender_name: str) -> Ticket:
        return await asyncio.to_thread(post_reply, ticket_id, text, sender_name)

    async def update_ticket(self, ticket_id: int, **fields) -> Ticket:
        return await asyncio.to_thread(update_ticket, ticket_id, **fields)

    async def assign_ticket(self, ticket_id: int, assignee: str | None) -> Ticket:
        return await asyncio.to_thread(assign_ticket, ticket_id, assignee)

    async def add_note(self, ticket_id: int, body: str, author: str) -> Ticket:
        return await asyncio.to_thread(add_note, ticket_id, body, author)

    async def create_ticket(self, subject: str, description: str, user_id: str, priority: str = "medium") -> int:
        return await asyncio.to_thread(create_ticket, subject, description, user_id, priority)

    async def post_user_message(self, ticket_id: int, text: str, sender_name: str) -> Ticket:
        return await asyncio.to_thread(post_user_message, ticket_id, text, sender_name)

    async def delete_ticket(self, ticket_id: int) -> None:
        await asyncio.to_thread(delete_ticket, ticket_id)
