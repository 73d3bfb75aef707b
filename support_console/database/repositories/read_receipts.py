"""
read_receipts.py - Read receipt repository
Single responsibility: last-read timestamp per ticket and actor role.
"""
from support_console.database.connection import get_connection
from support_console.utils.time import now_iso


def get_map(conn, ticket_ids: list[int]) -> dict[int, dict[str, str]]:
    if not ticket_ids:
        return {}
    placeholders = ",".join(["?"] * len(ticket_ids))
    result: dict[int, dict[str, str]] = {tid: {} for tid in ticket_ids}
    rows = conn.execute(
        f"SELECT ticket_id, role, read_at FROM read_receipts WHERE ticket_id IN ({placeholders})",
        ticket_ids,
    ).fetchall()
    for row in rows:
        result.setdefault(row["ticket_id"], {})[row["role"]] = row["read_at"]
    return result


def mark_read(ticket_id: int, role: str) -> str:
    read_at = now_iso()
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO read_receipts (ticket_id, role, read_at) VALUES (?, ?, ?)
            ON CONFLICT(ticket_id, role) DO UPDATE SET read_at = excluded.read_at
            """,
            (ticket_id, role, read_at),
        )
    return read_at
