"""Fan-out dispatcher: the single router between persisted state and sockets.

Every push is fire-and-forget. Callers persist first and only then hand the
stored row to the dispatcher; a missing target or a failed hydration never
undoes the write, the row stays reachable through the history endpoints.

Server emits:
  getOnlineUsers            [user_id, ...]                    -> everyone
  newMessage                hydrated message                  -> recipient
  newGroupMessage           hydrated message                  -> room subscribers
  message_status_update     { messageId, status }             -> sender
  message_reaction_update   { messageId, reactions }          -> peer / room
  groupUpdated / memberLeft / groupDeleted                    -> room subscribers
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .channels import ChannelMembership
from .identity import Identity
from .presence import PresenceRegistry
from .signaling import SignalRelay

logger = logging.getLogger(__name__)

Hydrator = Callable[[Any], Dict[str, Any]]


class Dispatcher:
    """Owns the presence registry and room membership for one process."""

    def __init__(self) -> None:
        self._socketio = None
        self._hydrate: Optional[Hydrator] = None
        self._reset()

    def init_app(self, app, socketio, *, hydrate: Hydrator) -> None:
        # Fresh state per app: a new SocketIO server invalidates every sid.
        self._reset()
        self._socketio = socketio
        self._hydrate = hydrate
        app.extensions["chattrix.dispatcher"] = self

    def _reset(self) -> None:
        self.registry = PresenceRegistry()
        self.channels = ChannelMembership()
        self.signals = SignalRelay(self.registry, self.channels, self._emit)

    def _emit(self, event: str, payload: Any, to: Optional[str] = None) -> None:
        if self._socketio is None:
            raise RuntimeError("Dispatcher not initialized with a SocketIO server")
        if to is None:
            self._socketio.emit(event, payload, namespace="/")
        else:
            self._socketio.emit(event, payload, to=to, namespace="/")

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------
    def connect(self, connection_ref: str, identity: Optional[Identity]) -> bool:
        if not self.registry.register(identity, connection_ref):
            return False
        self.broadcast_roster()
        return True

    def disconnect(self, connection_ref: str) -> Optional[Identity]:
        self.channels.drop(connection_ref)
        identity = self.registry.unregister(connection_ref)
        if identity is not None:
            self.broadcast_roster()
        return identity

    def join_room(self, connection_ref: str, room_id: int) -> None:
        self.channels.join(connection_ref, room_id)

    def leave_room(self, connection_ref: str, room_id: int) -> bool:
        return self.channels.leave(connection_ref, room_id)

    def online_users(self) -> List[int]:
        return [identity.user_id for identity in self.registry.roster()]

    def broadcast_roster(self) -> None:
        self._emit("getOnlineUsers", self.online_users())

    # ------------------------------------------------------------------
    # Message fan-out
    # ------------------------------------------------------------------
    def _targets_for(self, message) -> List[str]:
        if message.group_id is not None:
            return self.channels.subscribers(message.group_id)
        ref = self.registry.lookup(Identity.parse(message.receiver_id))
        return [ref] if ref else []

    def deliver_message(self, message) -> int:
        """Push a freshly persisted message; returns the number of pushes."""
        targets = self._targets_for(message)
        if not targets:
            logger.debug("No live target for message %s; left for history fetch", message.id)
            return 0
        try:
            payload = self._hydrate(message) if self._hydrate else {"id": message.id}
        except Exception:
            logger.exception("Hydration failed for message %s; push skipped", message.id)
            return 0
        event = "newGroupMessage" if message.group_id is not None else "newMessage"
        for ref in targets:
            self._emit(event, payload, ref)
        return len(targets)

    def push_status(self, message) -> bool:
        """Tell the sender that the message status changed."""
        ref = self.registry.lookup(Identity.parse(message.sender_id))
        if not ref:
            logger.debug("Status update for message %s dropped: sender offline", message.id)
            return False
        event = "group_message_status_update" if message.group_id is not None else "message_status_update"
        self._emit(event, {"messageId": message.id, "status": message.status}, ref)
        return True

    def push_reactions(self, message, actor: Identity, reactions: List[Dict[str, Any]]) -> int:
        payload = {"messageId": message.id, "reactions": reactions}
        if message.group_id is not None:
            actor_ref = self.registry.lookup(actor)
            targets = [ref for ref in self.channels.subscribers(message.group_id) if ref != actor_ref]
        else:
            peer_id = message.receiver_id if message.sender_id == actor.user_id else message.sender_id
            ref = self.registry.lookup(Identity.parse(peer_id))
            targets = [ref] if ref else []
        for ref in targets:
            self._emit("message_reaction_update", payload, ref)
        return len(targets)

    # ------------------------------------------------------------------
    # Group room notifications
    # ------------------------------------------------------------------
    def notify_room(self, room_id: int, event: str, payload: Any) -> int:
        targets = self.channels.subscribers(room_id)
        for ref in targets:
            self._emit(event, payload, ref)
        return len(targets)

    def dissolve_room(self, room_id: int) -> int:
        """Emit ``groupDeleted`` to the room, then forget it."""
        sent = self.notify_room(room_id, "groupDeleted", {"groupId": room_id})
        self.channels.dissolve(room_id)
        return sent
