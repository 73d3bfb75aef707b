"""
notes.py - Internal note repository
Single responsibility: persistence for admin-only ticket notes.
"""
from support_console.database.connection import get_connection
from support_console.domain.models import InternalNote
from support_console.utils.time import now_iso


def list_map(conn, ticket_ids: list[int]) -> dict[int, list[InternalNote]]:
    if not ticket_ids:
        return {}
    placeholders = ",".join(["?"] * len(ticket_ids))
    query = f"""
        SELECT * FROM ticket_notes
        WHERE ticket_id IN ({placeholders})
        ORDER BY created_at ASC, id ASC
    """
    result: dict[int, list[InternalNote]] = {tid: [] for tid in ticket_ids}
    for row in conn.execute(query, ticket_ids).fetchall():
        result.setdefault(row["ticket_id"], []).append(
            InternalNote(
                id=row["id"],
                author=row["author"],
                body=row["body"],
                created_at=row["created_at"],
            )
        )
    return result


def add_note(ticket_id: int, author: str, body: str) -> int:
    with get_connection() as conn:
        created_at = now_iso()
        cur = conn.execute(
            "INSERT INTO ticket_notes (ticket_id, author, body, created_at) VALUES (?, ?, ?, ?)",
            (ticket_id, author, body, created_at),
        )
        conn.execute(
            "UPDATE tickets SET updated_at = ? WHERE id = ?",
            (created_at, ticket_id),
        )
        return cur.lastrowid
