from conftest import make_ticket, with_message

from support_console.sync.store import TicketStore


def _store_with_selection():
    store = TicketStore()
    store.merge_list([make_ticket(1, ["user"]), make_ticket(2, ["user"])])
    store.select(1)
    store.set_draft("half-written reply")
    store.set_scroll_anchor(100)
    store.toggle_notes_panel()
    return store


def test_select_uses_list_object_and_resets_local_state():
    store = TicketStore()
    store.merge_list([make_ticket(1), make_ticket(2)])
    assert store.select(1) is True
    assert store.selected is store.tickets[0]
    store.set_draft("x")
    assert store.select(1) is False
    assert store.local.draft_reply == "x"
    store.select(2)
    assert store.local.draft_reply == ""
    assert store.selected.id == 2


def test_merge_list_preserves_local_fields_and_identity():
    store = _store_with_selection()
    selected = store.selected

    remote = with_message(make_ticket(1, ["user"], status="in_progress"))
    store.merge_list([remote, make_ticket(2, ["user"])])

    assert store.selected is selected
    assert selected.status == "in_progress"
    assert len(selected.messages) == 2
    assert store.tickets[0] is selected
    assert store.local.draft_reply == "half-written reply"
    assert store.local.scroll_anchor == 100
    assert store.local.notes_panel_open is True
    assert store.selected_id == 1


def test_merge_list_without_selected_ticket_keeps_selection():
    store = _store_with_selection()
    selected = store.selected
    store.merge_list([make_ticket(2)])
    assert store.selected is selected
    assert store.selected_id == 1
    assert [t.id for t in store.tickets] == [2]


def test_merge_detail_applies_only_for_current_selection():
    store = _store_with_selection()
    selected = store.selected

    assert store.merge_detail(make_ticket(2, ["user", "user", "user"])) is False
    assert len(store.find(2).messages) == 1

    remote = make_ticket(1, ["user", "admin"], priority="urgent")
    assert store.merge_detail(remote) is True
    assert store.selected is selected
    assert selected.priority == "urgent"
    assert store.find(1) is selected
    assert store.local.draft_reply == "half-written reply"


def test_merge_detail_after_clear_is_discarded():
    store = _store_with_selection()
    store.clear_selection()
    assert store.merge_detail(make_ticket(1, ["user", "user"])) is False
    assert store.selected is None
    assert len(store.find(1).messages) == 1


def test_merge_detail_seeds_selection_before_list_load():
    store = TicketStore()
    store.select(9)
    assert store.selected is None
    assert store.merge_detail(make_ticket(9, ["user"])) is True
    assert store.selected.id == 9


def test_local_edits_need_a_selection():
    store = TicketStore()
    store.set_draft("ignored")
    store.set_scroll_anchor(5)
    assert store.toggle_notes_panel() is False
    assert store.local.draft_reply == ""
    assert store.local.scroll_anchor is None


def test_many_merges_never_touch_draft():
    store = _store_with_selection()
    ticket = make_ticket(1, ["user"])
    for _ in range(5):
        ticket = with_message(ticket)
        store.merge_list([ticket, make_ticket(2)])
        store.merge_detail(ticket)
    assert store.local.draft_reply == "half-written reply"
    assert len(store.selected.messages) == 6


def test_visible_tickets_filters_by_keyword():
    store = TicketStore()
    store.merge_list(
        [
            make_ticket(1, subject="Refund request"),
            make_ticket(2, subject="Login issue", description="cannot REFUND"),
            make_ticket(3, subject="Other"),
        ]
    )
    assert [t.id for t in store.visible_tickets("refund")] == [1, 2]
    assert len(store.visible_tickets("")) == 3


def test_older_request_never_overwrites_newer_merge():
    store = TicketStore()
    store.merge_list([make_ticket(1, ["user"])])
    store.select(1)
    old = store.next_stamp()
    new = store.next_stamp()

    assert store.merge_detail(make_ticket(1, ["user", "user"]), stamp=new) is True
    held = store.merge_list([make_ticket(1, ["user"]), make_ticket(2)], stamp=old)

    assert held == {1}
    assert len(store.selected.messages) == 2
    assert store.tickets[0] is store.selected
    assert [t.id for t in store.tickets] == [1, 2]
    assert store.merge_detail(make_ticket(1, ["user"]), stamp=old) is False
    assert len(store.selected.messages) == 2


def test_held_row_keeps_current_object_after_selection_closes():
    store = TicketStore()
    store.merge_list([make_ticket(1, ["user"])])
    store.select(1)
    old = store.next_stamp()
    store.merge_detail(make_ticket(1, ["user", "user"]), stamp=store.next_stamp())
    store.clear_selection()

    assert store.merge_list([make_ticket(1, ["user"])], stamp=old) == {1}
    assert len(store.find(1).messages) == 2
    assert store.merge_list([make_ticket(1, ["user"] * 3)], stamp=store.next_stamp()) == set()
    assert len(store.find(1).messages) == 3
