"""Presence registry: identity -> live Socket.IO session id."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, List, Optional

from .identity import Identity

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Process-local map of who is reachable right now.

    One connection per identity. A second ``register`` for the same identity
    replaces the first; the replaced connection is orphaned and any push
    addressed to it is lost. The connection keeps the identity it connected
    with, so signals it sends are still attributed correctly.

    All operations are short in-memory critical sections guarded by a single
    lock; callers emit only after the lock is released.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._connections: Dict[Identity, str] = {}
        # connection_ref -> identity supplied at connect time
        self._identities: Dict[str, Identity] = {}

    def register(self, identity: Optional[Identity], connection_ref: str) -> bool:
        """Map ``identity`` to ``connection_ref``.

        Returns False (and changes nothing) when the identity is missing.
        """
        if identity is None or not connection_ref:
            return False
        with self._lock:
            previous = self._connections.get(identity)
            self._connections[identity] = connection_ref
            self._identities[connection_ref] = identity
        if previous and previous != connection_ref:
            logger.info("Identity %s moved from connection %s to %s", identity, previous, connection_ref)
        return True

    def lookup(self, identity: Optional[Identity]) -> Optional[str]:
        if identity is None:
            return None
        with self._lock:
            return self._connections.get(identity)

    def identity_of(self, connection_ref: Optional[str]) -> Optional[Identity]:
        if not connection_ref:
            return None
        with self._lock:
            return self._identities.get(connection_ref)

    def unregister(self, connection_ref: str) -> Optional[Identity]:
        """Remove the entry pointing at ``connection_ref``; no-op if absent.

        Returns the identity whose mapping was removed. An orphaned connection
        returns None because its identity already points elsewhere.
        """
        with self._lock:
            self._identities.pop(connection_ref, None)
            for identity, ref in self._connections.items():
                if ref == connection_ref:
                    del self._connections[identity]
                    return identity
        return None

    def roster(self) -> List[Identity]:
        with self._lock:
            return sorted(self._connections.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
