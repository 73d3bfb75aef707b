"""
schema.py - Schema creation helpers
Single responsibility: define and apply database schema.
"""
import logging

from support_console.database.connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tickets (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    subject     TEXT    NOT NULL,
    description TEXT    DEFAULT '',
    status      TEXT    NOT NULL DEFAULT 'open',
    priority    TEXT    NOT NULL DEFAULT 'medium',
    user_id     TEXT    NOT NULL DEFAULT '',
    assignee    TEXT,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS ticket_messages (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    ticket_id   INTEGER NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
    sender_role TEXT    NOT NULL,
    sender_name TEXT    NOT NULL DEFAULT '',
    body        TEXT    NOT NULL,
    created_at  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS ticket_notes (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    ticket_id   INTEGER NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
    author      TEXT    NOT NULL,
    body        TEXT    NOT NULL,
    created_at  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS read_receipts (
    ticket_id   INTEGER NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
    role        TEXT    NOT NULL,
    read_at     TEXT    NOT NULL,
    PRIMARY KEY (ticket_id, role)
);

CREATE TABLE IF NOT EXISTS filter_presets (
    owner       TEXT    PRIMARY KEY,
    status      TEXT    NOT NULL DEFAULT '',
    priority    TEXT    NOT NULL DEFAULT '',
    keyword     TEXT    NOT NULL DEFAULT '',
    updated_at  TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tickets_status
    ON tickets(status);
CREATE INDEX IF NOT EXISTS idx_tickets_priority
    ON tickets(priority);
CREATE INDEX IF NOT EXISTS idx_tickets_created_at
    ON tickets(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_ticket_messages_ticket_id
    ON ticket_messages(ticket_id);
CREATE INDEX IF NOT EXISTS idx_ticket_notes_ticket_id
    ON ticket_notes(ticket_id);
"""


def initialize_schema() -> None:
    """Create tables and indexes if missing."""
    try:
        with get_connection() as conn:
            conn.executescript(SCHEMA_SQL)
    except Exception as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
