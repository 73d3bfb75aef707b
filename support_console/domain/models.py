"""
models.py - Domain models
Single responsibility: typed containers for tickets and their thread.
"""
from dataclasses import dataclass, field, fields
from typing import Optional

STATUSES: tuple[str, ...] = ("open", "in_progress", "resolved", "closed")
PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "urgent")

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES: tuple[str, ...] = (ROLE_USER, ROLE_ADMIN)


@dataclass
class Message:
    sender_role: str
    sender_name: str
    body: str
    created_at: str | None = None
    id: Optional[int] = None

    def __getitem__(self, key):
        return getattr(self, key)


@dataclass
class InternalNote:
    author: str
    body: str
    created_at: str | None = None
    id: Optional[int] = None

    def __getitem__(self, key):
        return getattr(self, key)


@dataclass
class Ticket:
    subject: str
    description: str = ""
    status: str = "open"
    priority: str = "medium"
    user_id: str = ""
    assignee: str | None = None
    messages: list[Message] = field(default_factory=list)
    notes: list[InternalNote] = field(default_factory=list)
    read_by: dict[str, str] = field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None
    id: Optional[int] = None

    def __getitem__(self, key):
        return getattr(self, key)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


# Every Ticket field is backend-owned; local-only view state lives in the store.
TICKET_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(Ticket))
