"""Group room subscriptions keyed by group id."""
from __future__ import annotations

from collections import defaultdict
from threading import Lock
from typing import DefaultDict, Dict, List, Set


class ChannelMembership:
    """Tracks which connections explicitly joined which rooms.

    Subscription is independent of persisted group membership: a group member
    only becomes reachable for group fan-out after joining. No authorization
    happens here.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._rooms: DefaultDict[int, Set[str]] = defaultdict(set)
        self._by_connection: Dict[str, Set[int]] = {}

    def join(self, connection_ref: str, room_id: int) -> None:
        with self._lock:
            self._rooms[room_id].add(connection_ref)
            self._by_connection.setdefault(connection_ref, set()).add(room_id)

    def leave(self, connection_ref: str, room_id: int) -> bool:
        with self._lock:
            return self._discard(connection_ref, room_id)

    def drop(self, connection_ref: str) -> List[int]:
        """Leave every room held by ``connection_ref``; returns the rooms left."""
        with self._lock:
            rooms = sorted(self._by_connection.get(connection_ref, ()))
            for room_id in rooms:
                self._discard(connection_ref, room_id)
            return rooms

    def dissolve(self, room_id: int) -> List[str]:
        """Remove a room entirely (group deleted); returns former subscribers."""
        with self._lock:
            members = sorted(self._rooms.pop(room_id, set()))
            for ref in members:
                held = self._by_connection.get(ref)
                if held is not None:
                    held.discard(room_id)
                    if not held:
                        del self._by_connection[ref]
            return members

    def subscribers(self, room_id: int) -> List[str]:
        with self._lock:
            return sorted(self._rooms.get(room_id, ()))

    def rooms_of(self, connection_ref: str) -> List[int]:
        with self._lock:
            return sorted(self._by_connection.get(connection_ref, ()))

    def _discard(self, connection_ref: str, room_id: int) -> bool:
        # Caller holds the lock.
        members = self._rooms.get(room_id)
        if not members or connection_ref not in members:
            return False
        members.discard(connection_ref)
        if not members:
            del self._rooms[room_id]
        held = self._by_connection.get(connection_ref)
        if held is not None:
            held.discard(room_id)
            if not held:
                del self._by_connection[connection_ref]
        return True
