"""Typing indicators: stateless, never persisted, best effort.

The relay has no timers. Emitting ``stop_typing`` after inactivity is the
sending client's job; a lost stop signal leaves the receiver's indicator on
until the next message or reconnect.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .channels import ChannelMembership
from .identity import Identity
from .presence import PresenceRegistry

logger = logging.getLogger(__name__)

DIRECT_SIGNALS = frozenset({"typing", "stop_typing"})
GROUP_SIGNALS = frozenset({"group_typing", "group_stop_typing"})

Emit = Callable[[str, Any, Optional[str]], None]


class SignalRelay:
    def __init__(self, registry: PresenceRegistry, channels: ChannelMembership, emit: Emit) -> None:
        self._registry = registry
        self._channels = channels
        self._emit = emit

    def relay_direct(self, event: str, sender: Optional[Identity], target: Optional[Identity]) -> bool:
        """Forward a direct typing signal to the target's live connection."""
        if event not in DIRECT_SIGNALS:
            raise ValueError(f"not a direct signal: {event}")
        if sender is None or target is None:
            return False
        target_ref = self._registry.lookup(target)
        if not target_ref:
            logger.debug("%s from %s dropped: %s offline", event, sender, target)
            return False
        self._emit(event, {"fromUserId": sender.user_id}, target_ref)
        return True

    def relay_group(
        self,
        event: str,
        sender: Optional[Identity],
        sender_ref: str,
        room_id: int,
    ) -> int:
        """Broadcast a group typing signal to every other room subscriber."""
        if event not in GROUP_SIGNALS:
            raise ValueError(f"not a group signal: {event}")
        if sender is None:
            return 0
        payload = {"fromUserId": sender.user_id, "groupId": room_id}
        sent = 0
        for ref in self._channels.subscribers(room_id):
            if ref == sender_ref:
                continue
            self._emit(event, payload, ref)
            sent += 1
        return sent
