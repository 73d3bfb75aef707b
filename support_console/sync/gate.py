"""
gate.py - New message notification gate
Single responsibility: turn message-count changes into alert decisions,
at most one per poll observation and never for the admin's own messages.
"""
import logging
from typing import Callable

from support_console.domain.models import ROLE_USER, Ticket

logger = logging.getLogger(__name__)

PanelLookup = Callable[[int], bool]


class NotificationGate:
    def __init__(self):
        self._counts: dict[int, int] = {}

    def seen(self, ticket_id) -> int | None:
        return self._counts.get(ticket_id)

    def forget(self, ticket_id) -> None:
        self._counts.pop(ticket_id, None)

    def reset(self) -> None:
        self._counts = {}

    def evaluate(self, ticket_id, new_message_count: int, last_message, is_panel_open_for: PanelLookup) -> bool:
        """
        Record the observed count and decide whether to sound an alert.

        - first observation: seed only (no alert storm on initial load)
        - unchanged count: nothing
        - lower count: a different ticket object was substituted, reseed
        - higher count: store it, alert when the newest message is from a
          user and the ticket is not the one open right now

        is_panel_open_for is called at decision time so that it sees the
        current selection, not the one at the start of the polling loop.
        """
        try:
            count = int(new_message_count or 0)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid message count %r for ticket %s", new_message_count, ticket_id)
            return False

        stored = self._counts.get(ticket_id)
        if stored is None:
            self._counts[ticket_id] = count
            return False
        if count == stored:
            return False
        if count < stored:
            logger.debug("Message count for ticket %s dropped %d -> %d; reseeding", ticket_id, stored, count)
            self._counts[ticket_id] = count
            return False

        # A burst of several messages between two polls still yields one alert
        self._counts[ticket_id] = count

        if getattr(last_message, "sender_role", None) != ROLE_USER:
            return False
        try:
            panel_open = bool(is_panel_open_for(ticket_id))
        except Exception:
            logger.warning("Selection lookup failed for ticket %s; staying silent", ticket_id, exc_info=True)
            return False
        return not panel_open

    def observe(self, ticket: Ticket, is_panel_open_for: PanelLookup) -> bool:
        messages = getattr(ticket, "messages", None) or []
        return self.evaluate(ticket.id, len(messages), messages[-1] if messages else None, is_panel_open_for)
