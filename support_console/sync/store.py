"""
store.py - In-memory ticket store
Single responsibility: hold the list snapshot and the selected ticket, and
merge backend snapshots into them without touching local-only view state.
"""
import logging
from dataclasses import dataclass

from support_console.domain.models import TICKET_FIELDS, Ticket

logger = logging.getLogger(__name__)


@dataclass
class SelectionState:
    """Local-only state of the open ticket panel. Never sent to the backend."""

    ticket_id: int | None = None
    draft_reply: str = ""
    scroll_anchor: int | None = None  # message id the thread is scrolled to
    notes_panel_open: bool = False


def merge_into(target: Ticket, remote: Ticket) -> Ticket:
    """Copy every backend-owned field from remote onto target, in place."""
    for name in TICKET_FIELDS:
        setattr(target, name, getattr(remote, name))
    return target


class TicketStore:
    def __init__(self):
        self.tickets: list[Ticket] = []
        self.selected: Ticket | None = None
        self.local = SelectionState()
        self._stamp = 0
        # ticket id -> stamp of the newest request merged for it, by either loop
        self._merged_stamps: dict[int, int] = {}

    @property
    def selected_id(self) -> int | None:
        return self.local.ticket_id

    def is_selected(self, ticket_id) -> bool:
        return self.local.ticket_id is not None and self.local.ticket_id == ticket_id

    def find(self, ticket_id) -> Ticket | None:
        return next((t for t in self.tickets if t.id == ticket_id), None)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, ticket_id: int, seed: Ticket | None = None) -> bool:
        """Select a ticket. Returns False when it is already selected."""
        if self.is_selected(ticket_id):
            return False
        self.local = SelectionState(ticket_id=ticket_id)
        if seed is not None and seed.id == ticket_id:
            self.selected = seed
        else:
            self.selected = self.find(ticket_id)
        return True

    def clear_selection(self) -> bool:
        if self.local.ticket_id is None:
            return False
        self.local = SelectionState()
        self.selected = None
        return True

    def set_draft(self, text: str) -> None:
        if self.local.ticket_id is not None:
            self.local.draft_reply = text or ""

    def set_scroll_anchor(self, message_id: int | None) -> None:
        if self.local.ticket_id is not None:
            self.local.scroll_anchor = message_id

    def toggle_notes_panel(self) -> bool:
        if self.local.ticket_id is not None:
            self.local.notes_panel_open = not self.local.notes_panel_open
        return self.local.notes_panel_open

    # ------------------------------------------------------------------
    # Merges
    # ------------------------------------------------------------------

    def next_stamp(self) -> int:
        """Stamp a backend request at issue time. Shared by both pollers and actions."""
        self._stamp += 1
        return self._stamp

    def superseded(self, ticket_id, stamp: int | None) -> bool:
        """True when a newer request for ticket_id has already been merged."""
        return stamp is not None and stamp < self._merged_stamps.get(ticket_id, 0)

    def _record(self, ticket_id, stamp: int | None) -> None:
        if stamp is not None:
            self._merged_stamps[ticket_id] = max(stamp, self._merged_stamps.get(ticket_id, 0))

    def merge_list(self, remote_tickets: list[Ticket], stamp: int | None = None) -> set[int]:
        """
        Replace the list snapshot, merging the selected ticket in place.

        Tickets already merged from a newer request keep their current object
        and are returned as held, so callers skip them too.
        """
        snapshot = []
        held: set[int] = set()
        for remote in remote_tickets:
            if self.superseded(remote.id, stamp):
                held.add(remote.id)
                current = self.selected if self.is_selected(remote.id) else None
                snapshot.append(current or self.find(remote.id) or remote)
                continue
            self._record(remote.id, stamp)
            if self.is_selected(remote.id):
                if self.selected is None:
                    self.selected = remote
                else:
                    remote = merge_into(self.selected, remote)
            snapshot.append(remote)
        if held:
            logger.debug("Held list rows overtaken by newer fetches: %s", sorted(held))
        # Selected ticket missing from the snapshot stays selected until a detail fetch says otherwise
        self.tickets = snapshot
        return held

    def merge_detail(self, remote: Ticket | None, stamp: int | None = None) -> bool:
        """Merge a detail fetch. Returns False when the response is stale."""
        if remote is None or not self.is_selected(remote.id):
            logger.debug(
                "Discarding stale detail for ticket %s (selected=%s)",
                getattr(remote, "id", None),
                self.local.ticket_id,
            )
            return False
        if self.superseded(remote.id, stamp):
            logger.debug("Discarding detail for ticket %s overtaken by a newer fetch", remote.id)
            return False
        self._record(remote.id, stamp)
        if self.selected is None:
            self.selected = remote
        else:
            merge_into(self.selected, remote)
        self.tickets = [self.selected if t.id == remote.id else t for t in self.tickets]
        return True

    def visible_tickets(self, keyword: str = "") -> list[Ticket]:
        """List snapshot narrowed by a case-insensitive subject/description match."""
        needle = (keyword or "").strip().lower()
        if not needle:
            return list(self.tickets)
        return [
            t
            for t in self.tickets
            if needle in (t.subject or "").lower() or needle in (t.description or "").lower()
        ]
