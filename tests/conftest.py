"""
Test configuration and fixtures.

Provides:
- FakeBackend: in-memory ticket backend with failure injection and gated responses
- FakeClock: manually advanced sleep for PeriodicTask schedules
- sqlite_db: temporary SQLite file wired into config.DB_PATH
"""
import asyncio
import copy
from dataclasses import replace

import pytest

from support_console import config
from support_console.database.schema import initialize_schema
from support_console.domain.models import Message, Ticket


# =============================================================================
# Builders
# =============================================================================

_STAMP = "2026-01-01T10:{:02d}:00+00:00"


def make_message(mid: int, role: str = "user", minute: int | None = None, name: str | None = None) -> Message:
    return Message(
        id=mid,
        sender_role=role,
        sender_name=name or ("Alice" if role == "user" else "admin"),
        body=f"message {mid}",
        created_at=_STAMP.format(mid if minute is None else minute),
    )


def make_ticket(tid: int, roles: list[str] | None = None, **kwargs) -> Ticket:
    roles = roles or []
    base = tid * 100
    messages = [make_message(base + i, role, minute=i + 1) for i, role in enumerate(roles)]
    return Ticket(
        id=tid,
        subject=kwargs.pop("subject", f"Ticket {tid}"),
        description=kwargs.pop("description", f"Description {tid}"),
        messages=messages,
        **kwargs,
    )


def with_message(ticket: Ticket, role: str = "user") -> Ticket:
    """Copy of ticket with one more message appended."""
    n = len(ticket.messages)
    msg = make_message(ticket.id * 100 + n, role, minute=n + 1)
    return replace(ticket, messages=[*ticket.messages, msg])


# =============================================================================
# Fake backend
# =============================================================================


class FakeBackend:
    def __init__(self, tickets: list[Ticket] | None = None):
        self.tickets: dict[int, Ticket] = {t.id: t for t in (tickets or [])}
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}

    def put(self, ticket: Ticket) -> None:
        self.tickets[ticket.id] = ticket

    def add_message(self, ticket_id: int, role: str = "user") -> Ticket:
        self.tickets[ticket_id] = with_message(self.tickets[ticket_id], role)
        return self.tickets[ticket_id]

    def hold(self, op: str) -> asyncio.Event:
        """Block the next calls of op until the returned event is set."""
        event = asyncio.Event()
        self.gates[op] = event
        return event

    async def _enter(self, op: str, *args):
        self.calls.append((op, *args))
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        if op in self.fail:
            raise ConnectionError(f"{op} failed")

    async def list_tickets(self, filter):
        # Snapshot at request time, like get_ticket
        result = [
            copy.deepcopy(t)
            for t in sorted(self.tickets.values(), key=lambda t: t.id)
            if (not filter.status or t.status == filter.status)
            and (not filter.priority or t.priority == filter.priority)
        ]
        await self._enter("list_tickets", filter)
        return result[: filter.limit]

    async def get_ticket(self, ticket_id):
        # Snapshot at request time, like a response already on the wire
        snapshot = copy.deepcopy(self.tickets.get(ticket_id))
        await self._enter("get_ticket", ticket_id)
        if snapshot is None:
            raise LookupError(ticket_id)
        return snapshot

    async def mark_read(self, ticket_id, role):
        await self._enter("mark_read", ticket_id, role)
        self.tickets[ticket_id].read_by[role] = "2026-01-01T12:00:00+00:00"

    async def post_reply(self, ticket_id, text, sender_name):
        await self._enter("post_reply", ticket_id, text, sender_name)
        ticket = self.add_message(ticket_id, "admin")
        ticket.messages[-1].body = text
        return copy.deepcopy(ticket)

    async def update_ticket(self, ticket_id, **fields):
        await self._enter("update_ticket", ticket_id, fields)
        self.tickets[ticket_id] = replace(self.tickets[ticket_id], **fields)
        return copy.deepcopy(self.tickets[ticket_id])

    async def assign_ticket(self, ticket_id, assignee):
        await self._enter("assign_ticket", ticket_id, assignee)
        self.tickets[ticket_id] = replace(self.tickets[ticket_id], assignee=assignee)
        return copy.deepcopy(self.tickets[ticket_id])

    async def add_note(self, ticket_id, body, author):
        from support_console.domain.models import InternalNote

        await self._enter("add_note", ticket_id, body, author)
        ticket = self.tickets[ticket_id]
        ticket.notes = [*ticket.notes, InternalNote(author=author, body=body, id=len(ticket.notes) + 1)]
        return copy.deepcopy(ticket)

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)


# =============================================================================
# Fake clock
# =============================================================================


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self._sleepers: list[tuple[float, asyncio.Future]] = []

    async def sleep(self, seconds: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + seconds, fut))
        await fut

    @property
    def sleeping(self) -> int:
        return sum(1 for _, fut in self._sleepers if not fut.done())

    async def advance(self, seconds: float) -> None:
        # Let freshly started schedules reach their sleep first
        await settle()
        self.now += seconds
        due = [(t, f) for t, f in self._sleepers if t <= self.now]
        self._sleepers = [(t, f) for t, f in self._sleepers if t > self.now]
        for _, fut in due:
            if not fut.done():
                fut.set_result(None)
        await settle()


async def settle(rounds: int = 20) -> None:
    """Let spawned tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch):
    db_path = tmp_path / "data.db"
    monkeypatch.setattr(config, "DB_PATH", str(db_path))
    initialize_schema()
    return db_path
