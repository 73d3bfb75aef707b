"""
detail_poller.py - Open ticket poller
Single responsibility: keep the selected ticket fresh while a panel is open.

Idle  : no ticket selected, no schedule alive.
Polling: exactly one schedule alive, for the selected ticket id.
"""
import asyncio
import logging
from typing import Callable

from support_console.config import DETAIL_POLL_INTERVAL
from support_console.domain.models import Ticket
from support_console.sync.gate import NotificationGate
from support_console.sync.scheduler import PeriodicTask, Sleep
from support_console.sync.store import TicketStore
from support_console.utils.callbacks import safe_call

logger = logging.getLogger(__name__)

IDLE = "idle"
POLLING = "polling"


class DetailPoller:
    def __init__(
        self,
        backend,
        store: TicketStore,
        gate: NotificationGate,
        selected_id: Callable[[], int | None],
        interval: float = DETAIL_POLL_INTERVAL,
        sleep: Sleep | None = None,
        on_merged: Callable[[], None] | None = None,
        on_alert: Callable[[Ticket], None] | None = None,
    ):
        self.backend = backend
        self.store = store
        self.gate = gate
        self._selected_id = selected_id
        self.interval = interval
        self._sleep = sleep
        self._on_merged = on_merged
        self._on_alert = on_alert
        self._task: PeriodicTask | None = None
        self.ticket_id: int | None = None
        self.last_error: Exception | None = None

    @property
    def state(self) -> str:
        return POLLING if self._task is not None and self._task.running else IDLE

    def _is_panel_open_for(self, ticket_id) -> bool:
        return self._selected_id() == ticket_id

    def follow(self, ticket_id: int | None) -> None:
        """Switch the schedule to ticket_id (None returns to Idle)."""
        if ticket_id is not None and ticket_id == self.ticket_id and self.state == POLLING:
            return
        # The old schedule must be gone before a new one starts
        self.stop()
        if ticket_id is None:
            return
        self.ticket_id = ticket_id
        self._task = PeriodicTask(
            f"detail-poll-{ticket_id}",
            self.interval,
            lambda: self.tick(ticket_id),
            sleep=self._sleep,
        )
        self._task.start()

    def stop(self) -> None:
        if self._task is not None:
            self._task.stop()
            self._task = None
        self.ticket_id = None

    def refresh(self) -> asyncio.Task | None:
        if self._task is None:
            return None
        return self._task.tick_now()

    async def tick(self, ticket_id: int) -> bool:
        if self._selected_id() != ticket_id:
            return False
        stamp = self.store.next_stamp()
        try:
            remote = await self.backend.get_ticket(ticket_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = exc
            logger.warning("Failed to poll ticket %s", ticket_id, exc_info=True)
            return False
        self.last_error = None
        return self.apply(remote, stamp)

    def apply(self, remote: Ticket | None, stamp: int | None = None) -> bool:
        """
        Merge a full ticket into the open panel and run the gate on it.

        stamp is the store stamp taken when the request was issued; a response
        older than the last merge for this ticket is dropped by the store.
        """
        if remote is None or self._selected_id() != remote.id:
            logger.debug("Dropping detail response for ticket %s", getattr(remote, "id", None))
            return False
        if not self.store.merge_detail(remote, stamp):
            return False
        alert = self.gate.observe(remote, self._is_panel_open_for)
        safe_call(self._on_merged)
        if alert:
            safe_call(self._on_alert, remote)
        return True
