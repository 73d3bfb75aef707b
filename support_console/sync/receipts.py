"""
receipts.py - Read receipt publisher
Single responsibility: fire-and-forget "mark as read" when a ticket is opened.
"""
import asyncio
import logging

from support_console.domain.models import ROLE_ADMIN

logger = logging.getLogger(__name__)


class ReadReceiptPublisher:
    def __init__(self, backend, role: str = ROLE_ADMIN):
        self.backend = backend
        self.role = role
        self._pending: set[asyncio.Task] = set()

    def publish(self, ticket_id: int) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._send(ticket_id), name=f"mark-read-{ticket_id}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, ticket_id: int) -> bool:
        try:
            await self.backend.mark_read(ticket_id, self.role)
        except asyncio.CancelledError:
            raise
        except Exception:
            # Not retried: a stale unread badge is fixed by the next selection
            logger.warning("Failed to mark ticket %s as read", ticket_id, exc_info=True)
            return False
        return True

    def cancel_all(self) -> None:
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
