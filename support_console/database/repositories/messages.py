"""
messages.py - Ticket message repository
Single responsibility: persistence for the chat thread of a ticket.
"""
from support_console.database.connection import get_connection
from support_console.domain.models import Message
from support_console.utils.time import now_iso


def _row_to_message(row) -> Message:
    return Message(
        id=row["id"],
        sender_role=row["sender_role"],
        sender_name=row["sender_name"],
        body=row["body"],
        created_at=row["created_at"],
    )


def list_map(conn, ticket_ids: list[int]) -> dict[int, list[Message]]:
    """Messages per ticket, read on the caller's connection."""
    if not ticket_ids:
        return {}
    placeholders = ",".join(["?"] * len(ticket_ids))
    query = f"""
        SELECT * FROM ticket_messages
        WHERE ticket_id IN ({placeholders})
        ORDER BY created_at ASC, id ASC
    """
    result: dict[int, list[Message]] = {tid: [] for tid in ticket_ids}
    for row in conn.execute(query, ticket_ids).fetchall():
        result.setdefault(row["ticket_id"], []).append(_row_to_message(row))
    return result


def add_message(ticket_id: int, sender_role: str, sender_name: str, body: str) -> int:
    with get_connection() as conn:
        created_at = now_iso()
        cur = conn.execute(
            "INSERT INTO ticket_messages (ticket_id, sender_role, sender_name, body, created_at)"
            " VALUES (?, ?, ?, ?, ?)",
            (ticket_id, sender_role, sender_name, body, created_at),
        )
        conn.execute(
            "UPDATE tickets SET updated_at = ? WHERE id = ?",
            (created_at, ticket_id),
        )
        return cur.lastrowid
