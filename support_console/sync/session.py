"""
session.py - Ticket synchronization session
Single responsibility: own the store, gate and both pollers for one mounted
console, and route user actions and their results through them.
"""
import asyncio
import logging
from typing import Awaitable, Callable

from support_console.config import ADMIN_NAME, DETAIL_POLL_INTERVAL, LIST_POLL_INTERVAL
from support_console.domain.filters import TicketFilter
from support_console.domain.models import ROLE_ADMIN, Ticket
from support_console.services import filter_service
from support_console.sync.detail_poller import DetailPoller
from support_console.sync.gate import NotificationGate
from support_console.sync.list_poller import ListPoller
from support_console.sync.receipts import ReadReceiptPublisher
from support_console.sync.scheduler import Sleep
from support_console.sync.store import TicketStore
from support_console.sync.unread import unread_count
from support_console.utils.callbacks import safe_call

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class SyncSession:
    def __init__(
        self,
        backend,
        admin_name: str = ADMIN_NAME,
        detail_interval: float = DETAIL_POLL_INTERVAL,
        list_interval: float = LIST_POLL_INTERVAL,
        sleep: Sleep | None = None,
        on_alert: Callable[[Ticket], None] | None = None,
        initial_filter: TicketFilter | None = None,
        on_filter_change: Callable[[TicketFilter], None] | None = None,
    ):
        self.backend = backend
        self.admin_name = admin_name
        self.store = TicketStore()
        self.gate = NotificationGate()
        self.filter = initial_filter or TicketFilter()
        self.receipts = ReadReceiptPublisher(backend, role=ROLE_ADMIN)
        self.detail = DetailPoller(
            backend,
            self.store,
            self.gate,
            selected_id=self._selected_id,
            interval=detail_interval,
            sleep=sleep,
            on_merged=self._changed,
            on_alert=self._alert,
        )
        self.list = ListPoller(
            backend,
            self.store,
            self.gate,
            current_filter=self._current_filter,
            selected_id=self._selected_id,
            interval=list_interval,
            sleep=sleep,
            on_merged=self._changed,
            on_alert=self._alert,
        )
        self._on_alert = on_alert
        self._on_filter_change = on_filter_change
        self._listeners: list[Listener] = []
        self._actions: set[asyncio.Task] = set()
        self.started = False

    # Live accessors handed to the pollers
    def _selected_id(self) -> int | None:
        return self.store.selected_id

    def _current_filter(self) -> TicketFilter:
        return self.filter

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start both schedules. Must be called from the running event loop."""
        if self.started:
            return
        self.started = True
        self.list.start()
        self.list.refresh()
        if self.store.selected_id is not None:
            self.receipts.publish(self.store.selected_id)
            self.detail.follow(self.store.selected_id)
        logger.info("Sync session started")

    def stop(self) -> None:
        if not self.started:
            return
        self.started = False
        self.detail.stop()
        self.list.stop()
        self.receipts.cancel_all()
        for task in list(self._actions):
            task.cancel()
        self._actions.clear()
        self.gate.reset()
        logger.info("Sync session stopped")

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _changed(self) -> None:
        for listener in list(self._listeners):
            safe_call(listener)

    def _alert(self, ticket: Ticket) -> None:
        logger.info("New user message on ticket %s", ticket.id)
        safe_call(self._on_alert, ticket)

    # ------------------------------------------------------------------
    # Selection / filters / local edits
    # ------------------------------------------------------------------

    def select(self, ticket_id: int) -> bool:
        if not self.store.select(ticket_id):
            return False
        if self.started:
            self.receipts.publish(ticket_id)
            self.detail.follow(ticket_id)
            self.detail.refresh()
        self._changed()
        return True

    def clear_selection(self) -> bool:
        if not self.store.clear_selection():
            return False
        self.detail.follow(None)
        self._changed()
        return True

    def set_filters(self, status: str | None = None, priority: str | None = None, keyword: str | None = None) -> bool:
        current = self.filter
        new = filter_service.build_filter(
            status=current.status if status is None else status,
            priority=current.priority if priority is None else priority,
            keyword=current.keyword if keyword is None else keyword,
            limit=current.limit,
        )
        if new == current:
            return False
        self.filter = new
        safe_call(self._on_filter_change, new)
        # Keyword narrows the loaded list locally; status/priority need a refetch
        if self.started and (new.status != current.status or new.priority != current.priority):
            self.list.refresh()
        self._changed()
        return True

    def set_draft(self, text: str) -> None:
        self.store.set_draft(text)

    def set_scroll_anchor(self, message_id: int | None) -> None:
        self.store.set_scroll_anchor(message_id)

    def toggle_notes_panel(self) -> bool:
        opened = self.store.toggle_notes_panel()
        self._changed()
        return opened

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def selected(self) -> Ticket | None:
        return self.store.selected

    @property
    def draft_reply(self) -> str:
        return self.store.local.draft_reply

    @property
    def last_list_error(self) -> Exception | None:
        return self.list.last_error

    def visible_tickets(self) -> list[Ticket]:
        return self.store.visible_tickets(self.filter.keyword)

    def unread(self, ticket: Ticket) -> int:
        return unread_count(ticket, ROLE_ADMIN)

    def refresh_list(self) -> asyncio.Task | None:
        return self.list.refresh() if self.started else None

    def refresh_detail(self) -> asyncio.Task | None:
        return self.detail.refresh() if self.started else None

    # ------------------------------------------------------------------
    # Actions whose results flow back into the synchronized state
    # ------------------------------------------------------------------

    async def _flow_back(self, label: str, ticket_id: int, call: Callable[[], Awaitable[Ticket]]) -> bool:
        task = asyncio.get_running_loop().create_task(call(), name=f"{label}-{ticket_id}")
        self._actions.add(task)
        try:
            remote = await task
        except asyncio.CancelledError:
            # Cancelled by stop(): report failure instead of tearing down the caller
            if task.cancelled() and not self.started:
                return False
            raise
        except Exception:
            logger.warning("Failed to %s ticket %s", label, ticket_id, exc_info=True)
            return False
        finally:
            self._actions.discard(task)
        # Committed write: newer than any request still in flight
        self.detail.apply(remote, self.store.next_stamp())
        self.refresh_list()
        return True

    async def send_reply(self) -> bool:
        ticket_id = self.store.selected_id
        text = self.store.local.draft_reply.strip()
        if ticket_id is None or not text:
            return False

        async def call():
            remote = await self.backend.post_reply(ticket_id, text, self.admin_name)
            # Clear only if the admin did not switch tickets or keep typing
            if self.store.is_selected(ticket_id) and self.store.local.draft_reply.strip() == text:
                self.store.set_draft("")
            return remote

        return await self._flow_back("reply to", ticket_id, call)

    async def update_ticket(self, **fields) -> bool:
        ticket_id = self.store.selected_id
        if ticket_id is None or not fields:
            return False
        return await self._flow_back("update", ticket_id, lambda: self.backend.update_ticket(ticket_id, **fields))

    async def assign(self, assignee: str | None) -> bool:
        ticket_id = self.store.selected_id
        if ticket_id is None:
            return False
        return await self._flow_back("assign", ticket_id, lambda: self.backend.assign_ticket(ticket_id, assignee))

    async def add_note(self, body: str) -> bool:
        ticket_id = self.store.selected_id
        if ticket_id is None or not (body or "").strip():
            return False
        return await self._flow_back(
            "add note to", ticket_id, lambda: self.backend.add_note(ticket_id, body.strip(), self.admin_name)
        )
