"""Message delivery state machine.

    sent ──(recipient reads)──> read

``delivered`` is part of the wire vocabulary but no event moves a message
into it. Client ``message_delivered`` notices are accepted and ignored.
Group messages share one status field, so they have no read transition.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from chattrix.errors import ForbiddenError
from .identity import Identity


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


def current_status(message) -> MessageStatus:
    return MessageStatus(message.status or MessageStatus.SENT.value)


def can_transition(current: MessageStatus, target: MessageStatus) -> bool:
    """Only forward moves along sent -> read are reachable."""
    if current == target:
        return False
    return current == MessageStatus.SENT and target == MessageStatus.READ


def mark_read(message, reader: Optional[Identity], *, now: Optional[datetime] = None) -> bool:
    """Advance ``message`` to ``read`` on behalf of ``reader``.

    Returns True when the status changed, False when it was already read.
    Raises ForbiddenError if ``reader`` is not the direct recipient; the
    message is left untouched in that case.
    """
    if message.group_id is not None:
        raise ForbiddenError("Group messages have no per-recipient read status")
    if reader is None or message.receiver_id != reader.user_id:
        raise ForbiddenError("Only the recipient can mark this message as read")

    status = current_status(message)
    if not can_transition(status, MessageStatus.READ):
        return False
    message.status = MessageStatus.READ.value
    message.seen_at = now or datetime.utcnow()
    return True
