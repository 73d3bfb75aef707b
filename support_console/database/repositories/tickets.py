"""
tickets.py - Ticket repository
Single responsibility: persistence for tickets, hydrated with thread/notes/receipts.
"""

import re

from support_console.database.connection import get_connection
from support_console.database.repositories import messages as message_repo
from support_console.database.repositories import notes as note_repo
from support_console.database.repositories import read_receipts as receipt_repo
from support_console.domain.filters import TicketFilter
from support_console.domain.models import Ticket
from support_console.utils.time import now_iso

# Columns that update_fields may touch
UPDATABLE_COLUMNS = ("subject", "description", "status", "priority", "assignee")


def _row_to_ticket(row) -> Ticket:
    return Ticket(
        id=row["id"],
        subject=row["subject"],
        description=row["description"] or "",
        status=row["status"],
        priority=row["priority"],
        user_id=row["user_id"] or "",
        assignee=row["assignee"] or None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _begin_read(conn) -> None:
    # Tickets and their thread, notes and receipts come from one snapshot; the
    # connection context manager ends the transaction on exit
    conn.execute("BEGIN")


def _hydrate(conn, tickets: list[Ticket]) -> list[Ticket]:
    ids = [t.id for t in tickets]
    messages_map = message_repo.list_map(conn, ids)
    notes_map = note_repo.list_map(conn, ids)
    receipts_map = receipt_repo.get_map(conn, ids)
    for t in tickets:
        t.messages = messages_map.get(t.id, [])
        t.notes = notes_map.get(t.id, [])
        t.read_by = receipts_map.get(t.id, {})
    return tickets


def list_tickets(filter: TicketFilter) -> list[Ticket]:
    clauses: list[str] = []
    params: list = []

    # Split keyword by whitespace (half-width and full-width) for AND partial matching
    keywords = [w for w in re.split(r"[\s\u3000]+", filter.keyword) if w]
    for kw in keywords:
        clauses.append("(subject LIKE ? OR description LIKE ?)")
        params.extend([f"%{kw}%", f"%{kw}%"])

    if filter.status:
        clauses.append("status = ?")
        params.append(filter.status)

    if filter.priority:
        clauses.append("priority = ?")
        params.append(filter.priority)

    where_clause = (" AND ".join(clauses)) if clauses else "1=1"
    params.append(filter.limit)

    with get_connection() as conn:
        _begin_read(conn)
        rows = conn.execute(
            f"SELECT * FROM tickets WHERE {where_clause} ORDER BY created_at DESC, id DESC LIMIT ?",
            params,
        ).fetchall()
        return _hydrate(conn, [_row_to_ticket(r) for r in rows])


def get_ticket(ticket_id: int) -> Ticket | None:
    with get_connection() as conn:
        _begin_read(conn)
        row = conn.execute("SELECT * FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
        if not row:
            return None
        return _hydrate(conn, [_row_to_ticket(row)])[0]


def create_ticket(ticket: Ticket) -> int:
    with get_connection() as conn:
        cur = conn.execute(
            "INSERT INTO tickets (subject, description, status, priority, user_id, assignee, created_at, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                ticket.subject,
                ticket.description,
                ticket.status,
                ticket.priority,
                ticket.user_id,
                ticket.assignee,
                ticket.created_at or now_iso(),
                ticket.updated_at or now_iso(),
            ),
        )
        tid = cur.lastrowid
        if tid is None:
            raise RuntimeError("Failed to insert ticket")
        return tid


def update_fields(ticket_id: int, **values) -> bool:
    """Update the given columns; returns False when the ticket does not exist."""
    columns = [k for k in values if k in UPDATABLE_COLUMNS]
    assignments = ", ".join(f"{c} = ?" for c in columns + ["updated_at"])
    params = [values[c] for c in columns] + [now_iso(), ticket_id]
    with get_connection() as conn:
        cur = conn.execute(f"UPDATE tickets SET {assignments} WHERE id = ?", params)
        return cur.rowcount > 0


def exists(ticket_id: int) -> bool:
    with get_connection() as conn:
        row = conn.execute("SELECT 1 FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
        return row is not None


def delete_ticket(ticket_id: int) -> None:
    with get_connection() as conn:
        conn.execute("DELETE FROM tickets WHERE id = ?", (ticket_id,))
