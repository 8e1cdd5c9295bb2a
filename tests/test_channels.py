from chattrix.realtime.channels import ChannelMembership


def test_join_and_subscribers():
    rooms = ChannelMembership()
    rooms.join("s1", 10)
    rooms.join("s2", 10)
    rooms.join("s1", 11)

    assert rooms.subscribers(10) == ["s1", "s2"]
    assert rooms.rooms_of("s1") == [10, 11]
    assert rooms.subscribers(99) == []


def test_join_is_idempotent():
    rooms = ChannelMembership()
    rooms.join("s1", 10)
    rooms.join("s1", 10)
    assert rooms.subscribers(10) == ["s1"]


def test_leave_only_affects_one_room():
    rooms = ChannelMembership()
    rooms.join("s1", 10)
    rooms.join("s1", 11)

    assert rooms.leave("s1", 10) is True
    assert rooms.leave("s1", 10) is False
    assert rooms.subscribers(10) == []
    assert rooms.rooms_of("s1") == [11]


def test_drop_leaves_every_room():
    rooms = ChannelMembership()
    rooms.join("s1", 10)
    rooms.join("s1", 11)
    rooms.join("s2", 11)

    assert rooms.drop("s1") == [10, 11]
    assert rooms.rooms_of("s1") == []
    assert rooms.subscribers(11) == ["s2"]
    assert rooms.drop("s1") == []


def test_dissolve_forgets_room_for_all_connections():
    rooms = ChannelMembership()
    rooms.join("s1", 10)
    rooms.join("s2", 10)
    rooms.join("s2", 12)

    assert rooms.dissolve(10) == ["s1", "s2"]
    assert rooms.subscribers(10) == []
    assert rooms.rooms_of("s1") == []
    assert rooms.rooms_of("s2") == [12]
