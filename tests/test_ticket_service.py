import pytest

from support_console.database.repositories import messages as message_repo
from support_console.database.repositories import notes as note_repo
from support_console.database.repositories import read_receipts as receipt_repo
from support_console.domain.filters import TicketFilter
from support_console.services import filter_service
from support_console.services import ticket_service
from support_console.services.ticket_service import SQLiteTicketBackend, TicketNotFoundError
from support_console.sync.unread import unread_count


def _seed(subject="Printer offline", priority="medium", user_id="u-1"):
    return ticket_service.create_ticket(subject, "The office printer is offline", user_id, priority=priority)


def test_create_and_get_ticket(sqlite_db):
    tid = _seed()
    ticket = ticket_service.get_ticket(tid)
    assert ticket.subject == "Printer offline"
    assert ticket.status == "open"
    assert ticket.messages == []
    assert ticket.read_by == {}
    assert ticket.created_at is not None


def test_create_ticket_validates(sqlite_db):
    with pytest.raises(ValueError):
        ticket_service.create_ticket("   ", "", "u-1")
    with pytest.raises(ValueError):
        ticket_service.create_ticket("x", "", "u-1", priority="whenever")


def test_missing_ticket_raises_not_found(sqlite_db):
    with pytest.raises(TicketNotFoundError) as exc:
        ticket_service.get_ticket(404)
    assert exc.value.ticket_id == 404
    with pytest.raises(LookupError):
        ticket_service.post_reply(404, "hello", "admin")
    with pytest.raises(TicketNotFoundError):
        ticket_service.update_ticket(404, status="closed")
    with pytest.raises(TicketNotFoundError):
        ticket_service.mark_read(404, "admin")


def test_thread_order_and_unread_after_mark_read(sqlite_db):
    tid = _seed()
    ticket_service.post_user_message(tid, "It still fails", "Alice")
    ticket_service.post_user_message(tid, "Any update?", "Alice")
    ticket = ticket_service.post_reply(tid, "  Checking now  ", "Hanako")

    assert [m.sender_role for m in ticket.messages] == ["user", "user", "admin"]
    assert ticket.messages[-1].body == "Checking now"
    assert ticket.message_count == 3
    assert unread_count(ticket, "admin") == 2
    assert unread_count(ticket, "user") == 1

    ticket_service.mark_read(tid, "admin")
    ticket = ticket_service.get_ticket(tid)
    assert unread_count(ticket, "admin") == 0

    ticket_service.post_user_message(tid, "Thanks!", "Alice")
    assert unread_count(ticket_service.get_ticket(tid), "admin") == 1


def test_empty_reply_is_rejected(sqlite_db):
    tid = _seed()
    with pytest.raises(ValueError):
        ticket_service.post_reply(tid, "   ", "Hanako")


def test_update_ticket_validates_fields(sqlite_db):
    tid = _seed()
    ticket = ticket_service.update_ticket(tid, status="resolved", priority="high")
    assert (ticket.status, ticket.priority) == ("resolved", "high")

    with pytest.raises(ValueError):
        ticket_service.update_ticket(tid, status="done")
    with pytest.raises(ValueError):
        ticket_service.update_ticket(tid, user_id="someone-else")


def test_assign_and_notes(sqlite_db):
    tid = _seed()
    assert ticket_service.assign_ticket(tid, " Hanako ").assignee == "Hanako"
    assert ticket_service.assign_ticket(tid, "").assignee is None

    ticket = ticket_service.add_note(tid, "Customer is on the VIP plan", "Hanako")
    assert [n.body for n in ticket.notes] == ["Customer is on the VIP plan"]
    assert ticket.notes[0].author == "Hanako"


def test_list_filters(sqlite_db):
    a = _seed("Refund request", priority="high")
    b = _seed("Login broken", priority="low")
    c = _seed("Refund delayed", priority="low")
    ticket_service.update_ticket(b, status="closed")

    newest_first = ticket_service.list_tickets(TicketFilter())
    assert [t.id for t in newest_first] == [c, b, a]

    assert [t.id for t in ticket_service.list_tickets(TicketFilter(status="closed"))] == [b]
    assert [t.id for t in ticket_service.list_tickets(TicketFilter(priority="low"))] == [c, b]
    assert [t.id for t in ticket_service.list_tickets(TicketFilter(keyword="refund"))] == [c, a]
    assert [t.id for t in ticket_service.list_tickets(TicketFilter(keyword="refund\u3000delayed"))] == [c]
    assert len(ticket_service.list_tickets(TicketFilter(limit=2))) == 2


def test_delete_cascades(sqlite_db):
    tid = _seed()
    ticket_service.post_user_message(tid, "hello", "Alice")
    ticket_service.delete_ticket(tid)
    with pytest.raises(TicketNotFoundError):
        ticket_service.get_ticket(tid)


def test_build_filter_normalizes_values():
    f = filter_service.build_filter(status="nope", priority="urgent", keyword="  refund  ", limit=0)
    assert f == TicketFilter(status="", priority="urgent", keyword="refund")


@pytest.mark.asyncio
async def test_async_backend_round_trip(sqlite_db):
    backend = SQLiteTicketBackend()
    tid = await backend.create_ticket("VPN down", "cannot connect", "u-9", "urgent")
    await backend.post_user_message(tid, "Please help", "Bob")

    listed = await backend.list_tickets(TicketFilter(priority="urgent"))
    assert [t.id for t in listed] == [tid]
    assert unread_count(listed[0], "admin") == 1

    await backend.mark_read(tid, "admin")
    ticket = await backend.post_reply(tid, "On it", "Hanako")
    assert unread_count(ticket, "admin") == 0
    assert ticket.messages[-1].sender_name == "Hanako"

    ticket = await backend.update_ticket(tid, status="in_progress")
    assert ticket.status == "in_progress"
    ticket = await backend.assign_ticket(tid, "Hanako")
    assert ticket.assignee == "Hanako"
    ticket = await backend.add_note(tid, "escalated to network team", "Hanako")
    assert len(ticket.notes) == 1

    await backend.delete_ticket(tid)
    with pytest.raises(TicketNotFoundError):
        await backend.get_ticket(tid)


def test_last_filter_is_stored_per_admin(sqlite_db):
    assert filter_service.load_last("hanako") == TicketFilter()

    filter_service.save_last("hanako", TicketFilter(status="closed", priority="high", keyword="refund"))
    filter_service.save_last("taro", TicketFilter(status="open"))
    filter_service.save_last("hanako", TicketFilter(status="resolved", keyword="vpn"))

    assert filter_service.load_last("hanako") == TicketFilter(status="resolved", keyword="vpn")
    assert filter_service.load_last("taro") == TicketFilter(status="open")


def test_ticket_and_thread_are_read_on_one_connection(sqlite_db, monkeypatch):
    tid = _seed()
    ticket_service.post_user_message(tid, "hello", "Alice")
    ticket_service.add_note(tid, "VIP", "Hanako")
    ticket_service.mark_read(tid, "admin")

    def second_connection():
        raise AssertionError("thread rows must come from the ticket's own read")

    for repo in (message_repo, note_repo, receipt_repo):
        monkeypatch.setattr(repo, "get_connection", second_connection)

    [listed] = ticket_service.list_tickets(TicketFilter())
    fetched = ticket_service.get_ticket(tid)
    for ticket in (listed, fetched):
        assert [m.body for m in ticket.messages] == ["hello"]
        assert [n.body for n in ticket.notes] == ["VIP"]
        assert "admin" in ticket.read_by
