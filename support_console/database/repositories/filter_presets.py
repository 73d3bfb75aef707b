"""
filter_presets.py - Filter preset repository
Single responsibility: persistence for each admin's last-used list filter.
"""
from support_console.database.connection import get_connection
from support_console.utils.time import now_iso


def get_last(owner: str):
    with get_connection() as conn:
        return conn.execute(
            "SELECT status, priority, keyword FROM filter_presets WHERE owner = ?",
            (owner,),
        ).fetchone()


def save_last(owner: str, status: str, priority: str, keyword: str) -> None:
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO filter_presets (owner, status, priority, keyword, updated_at) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(owner) DO UPDATE SET
                status = excluded.status,
                priority = excluded.priority,
                keyword = excluded.keyword,
                updated_at = excluded.updated_at
            """,
            (owner, status, priority, keyword, now_iso()),
        )
