"""
list_poller.py - Background ticket list poller
Single responsibility: refresh the filtered list and raise alerts for
tickets that are not open in the panel.
"""
import asyncio
import logging
from dataclasses import replace
from typing import Callable

from support_console.config import LIST_POLL_INTERVAL
from support_console.domain.filters import TicketFilter
from support_console.domain.models import Ticket
from support_console.sync.gate import NotificationGate
from support_console.sync.scheduler import PeriodicTask, Sleep
from support_console.sync.store import TicketStore
from support_console.utils.callbacks import safe_call

logger = logging.getLogger(__name__)


def fetch_filter(active: TicketFilter) -> TicketFilter:
    """Filter sent to the backend; the keyword narrows the list client-side only."""
    return replace(active, keyword="")


class ListPoller:
    def __init__(
        self,
        backend,
        store: TicketStore,
        gate: NotificationGate,
        current_filter: Callable[[], TicketFilter],
        selected_id: Callable[[], int | None],
        interval: float = LIST_POLL_INTERVAL,
        sleep: Sleep | None = None,
        on_merged: Callable[[], None] | None = None,
        on_alert: Callable[[Ticket], None] | None = None,
    ):
        self.backend = backend
        self.store = store
        self.gate = gate
        self._current_filter = current_filter
        self._selected_id = selected_id
        self._on_merged = on_merged
        self._on_alert = on_alert
        self._task = PeriodicTask("list-poll", interval, self.tick, sleep=sleep)
        self.last_error: Exception | None = None
        self._issued = 0
        self._applied = 0

    @property
    def running(self) -> bool:
        return self._task.running

    def _is_panel_open_for(self, ticket_id) -> bool:
        return self._selected_id() == ticket_id

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    def refresh(self) -> asyncio.Task:
        return self._task.tick_now()

    async def tick(self) -> bool:
        # Read at tick time: filters and selection change between ticks
        requested = fetch_filter(self._current_filter())
        self._issued += 1
        seq = self._issued
        stamp = self.store.next_stamp()
        try:
            tickets = await self.backend.list_tickets(requested)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = exc
            logger.warning("Background ticket list poll failed", exc_info=True)
            return False
        self.last_error = None

        if fetch_filter(self._current_filter()) != requested:
            logger.debug("Filters changed while polling; dropping list response")
            return False
        if seq < self._applied:
            logger.debug("Dropping list response overtaken by a newer poll")
            return False
        self._applied = seq

        held = self.store.merge_list(tickets, stamp)
        # Held rows are older than what the gate already saw for them
        alerts = [
            t for t in tickets if t.id not in held and self.gate.observe(t, self._is_panel_open_for)
        ]
        safe_call(self._on_merged)
        for ticket in alerts:
            safe_call(self._on_alert, ticket)
        return True
