import threading

from chattrix.realtime.identity import Identity
from chattrix.realtime.presence import PresenceRegistry


def test_identity_parse_accepts_positive_ids():
    assert Identity.parse(7) == Identity(7)
    assert Identity.parse(" 12 ") == Identity(12)
    assert Identity.parse(Identity(3)) == Identity(3)


def test_identity_parse_rejects_blank_and_garbage():
    for raw in (None, "", "   ", "abc", "2.5", 0, -4, 2.9, True, [], {}):
        assert Identity.parse(raw) is None


def test_second_register_overwrites_previous_connection():
    registry = PresenceRegistry()
    alice = Identity(1)
    assert registry.register(alice, "sid-1")
    assert registry.register(alice, "sid-2")

    assert registry.lookup(alice) == "sid-2"
    assert registry.roster() == [alice]
    assert len(registry) == 1


def test_register_without_identity_is_ignored():
    registry = PresenceRegistry()
    assert registry.register(None, "sid-1") is False
    assert registry.roster() == []
    assert registry.identity_of("sid-1") is None


def test_unregister_removes_by_connection_and_is_noop_when_missing():
    registry = PresenceRegistry()
    registry.register(Identity(1), "sid-a")
    registry.register(Identity(2), "sid-b")

    assert registry.unregister("sid-a") == Identity(1)
    assert registry.unregister("sid-a") is None
    assert registry.unregister("nope") is None
    assert registry.roster() == [Identity(2)]


def test_orphaned_connection_disconnect_keeps_newer_mapping():
    registry = PresenceRegistry()
    bob = Identity(2)
    registry.register(bob, "old")
    registry.register(bob, "new")

    # The orphan still knows who it was, but no longer owns the mapping.
    assert registry.identity_of("old") == bob
    assert registry.unregister("old") is None
    assert registry.lookup(bob) == "new"
    assert registry.identity_of("old") is None


def test_roster_after_connect_connect_disconnect():
    registry = PresenceRegistry()
    registry.register(Identity(1), "a")
    registry.register(Identity(2), "b")
    registry.unregister("a")
    assert registry.roster() == [Identity(2)]


def test_concurrent_registration_keeps_one_mapping_per_identity():
    registry = PresenceRegistry()
    identities = [Identity(i) for i in range(1, 21)]

    def worker(n):
        for identity in identities:
            registry.register(identity, f"sid-{n}-{identity.user_id}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert registry.roster() == identities
    for identity in identities:
        assert registry.lookup(identity).endswith(f"-{identity.user_id}")
