"""
unread.py - Unread message counting
Single responsibility: derive the unread count of a ticket for an actor role.
"""
from support_console.domain.models import ROLE_ADMIN, ROLE_USER, Ticket
from support_console.utils.time import parse_iso


def other_role(actor_role: str) -> str:
    return ROLE_USER if actor_role == ROLE_ADMIN else ROLE_ADMIN


def unread_count(ticket: Ticket, actor_role: str) -> int:
    """
    Messages from the other role that the actor has not read yet.

    Without a read receipt every such message counts as unread. Messages
    with a missing role or an unparseable timestamp are ignored.
    """
    sender = other_role(actor_role)
    incoming = [m for m in (ticket.messages or []) if getattr(m, "sender_role", None) == sender]
    if not incoming:
        return 0

    read_at = parse_iso((ticket.read_by or {}).get(actor_role))
    if read_at is None:
        return len(incoming)

    count = 0
    for m in incoming:
        created = parse_iso(getattr(m, "created_at", None))
        if created is not None and created > read_at:
            count += 1
    return count
