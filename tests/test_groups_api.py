import pytest

from chattrix.extensions import db, dispatcher
from chattrix.models import Group


@pytest.fixture()
def trio(make_user, login):
    ids = {name: make_user(name) for name in ("Alice", "Bob", "Carol")}
    alice = login("Alice")
    resp = alice.post("/api/groups", json={"name": "Trio", "members": [ids["Bob"], ids["Carol"]]})
    assert resp.status_code == 201
    return ids, resp.get_json()["id"]


def test_create_group_adds_admin_as_member(app, trio):
    ids, group_id = trio
    with app.app_context():
        group = db.session.get(Group, group_id)
        assert group.admin_id == ids["Alice"]
        assert sorted(m.user_id for m in group.members) == sorted(ids.values())
        assert group.image == app.config["DEFAULT_GROUP_IMAGE"]


def test_create_group_validates_input(app, make_user, login):
    make_user("Alice")
    alice = login("Alice")
    assert alice.post("/api/groups", json={"name": "x", "members": []}).status_code == 400
    assert alice.post("/api/groups", json={"name": "  ", "members": [1]}).status_code == 400
    resp = alice.post("/api/groups", json={"name": "x", "members": [404]})
    assert resp.status_code == 400
    assert resp.get_json()["details"] == [404]


def test_group_fanout_reaches_only_room_subscribers(app, trio, login, connect, received):
    ids, group_id = trio
    bob = connect(ids["Bob"])
    carol = connect(ids["Carol"])
    bob.emit("join_group", {"groupId": group_id})
    bob.get_received()
    carol.get_received()

    resp = login("Alice").post(f"/api/groups/{group_id}/message", json={"text": "hey all"})
    assert resp.status_code == 201
    message_id = resp.get_json()["id"]

    pushed = received(bob, "newGroupMessage")
    assert [m["id"] for m in pushed] == [message_id]
    assert pushed[0]["sender"]["fullName"] == "Alice"
    assert received(carol, "newGroupMessage") == []

    history = login("Carol").get(f"/api/groups/{group_id}/messages").get_json()
    assert [(m["id"], m["status"]) for m in history] == [(message_id, "sent")]


def test_non_member_cannot_post_or_read(app, trio, make_user, login):
    _ids, group_id = trio
    make_user("Mallory")
    mallory = login("Mallory")
    assert mallory.post(f"/api/groups/{group_id}/message", json={"text": "hi"}).status_code == 403
    assert mallory.get(f"/api/groups/{group_id}/messages").status_code == 403
    assert mallory.get(f"/api/groups/{group_id}/details").status_code == 404


def test_missing_group_is_not_found(app, make_user, login):
    make_user("Alice")
    alice = login("Alice")
    assert alice.post("/api/groups/99/message", json={"text": "hi"}).status_code == 404
    assert alice.get("/api/groups/99").status_code == 404


def test_group_messages_cannot_be_marked_read(app, trio, login):
    _ids, group_id = trio
    message_id = login("Alice").post(f"/api/groups/{group_id}/message", json={"text": "hi"}).get_json()["id"]
    assert login("Bob").post(f"/api/messages/{message_id}/read").status_code == 403


def test_group_reaction_pushes_to_other_subscribers(app, trio, login, connect, received):
    ids, group_id = trio
    message_id = login("Alice").post(f"/api/groups/{group_id}/message", json={"text": "hi"}).get_json()["id"]
    alice = connect(ids["Alice"])
    bob = connect(ids["Bob"])
    alice.emit("join_group", {"groupId": group_id})
    bob.emit("join_group", {"groupId": group_id})
    alice.get_received()
    bob.get_received()

    login("Bob").post(f"/api/messages/{message_id}/react", json={"emoji": "🎉"})
    assert received(alice, "message_reaction_update")[0]["reactions"] == [{"emoji": "🎉", "userId": ids["Bob"]}]
    assert received(bob, "message_reaction_update") == []


def test_list_groups_includes_last_message(app, trio, login):
    _ids, group_id = trio
    alice = login("Alice")
    groups = alice.get("/api/groups").get_json()
    assert groups[0]["lastMessage"] is None

    alice.post(f"/api/groups/{group_id}/message", json={"text": "first"})
    login("Bob").post(f"/api/groups/{group_id}/message", json={"text": "second"})
    groups = alice.get("/api/groups").get_json()
    assert groups[0]["lastMessage"]["text"] == "second"
    assert groups[0]["lastMessage"]["sender"]["fullName"] == "Bob"


def test_membership_management_is_admin_only(app, trio, make_user, login):
    ids, group_id = trio
    dave = make_user("Dave")
    alice, bob = login("Alice"), login("Bob")

    assert bob.post(f"/api/groups/{group_id}/add-member", json={"memberId": dave}).status_code == 403
    resp = alice.post(f"/api/groups/{group_id}/add-member", json={"memberId": dave})
    assert resp.status_code == 200
    assert dave in [m["id"] for m in resp.get_json()["members"]]
    assert alice.post(f"/api/groups/{group_id}/add-member", json={"memberId": dave}).status_code == 400

    assert alice.post(f"/api/groups/{group_id}/remove-member", json={"memberId": ids["Alice"]}).status_code == 400
    resp = alice.post(f"/api/groups/{group_id}/remove-member", json={"memberId": dave})
    assert dave not in [m["id"] for m in resp.get_json()["members"]]


def test_leave_notifies_room_and_admin_cannot_leave(app, trio, login, connect, received):
    ids, group_id = trio
    alice = connect(ids["Alice"])
    alice.emit("join_group", {"groupId": group_id})
    alice.get_received()

    assert login("Alice").post(f"/api/groups/{group_id}/leave").status_code == 400
    assert login("Bob").post(f"/api/groups/{group_id}/leave").status_code == 200
    assert received(alice, "memberLeft") == [{"groupId": group_id, "userId": ids["Bob"]}]
    assert login("Bob").post(f"/api/groups/{group_id}/leave").status_code == 403


def test_update_notifies_room(app, trio, login, connect, received):
    ids, group_id = trio
    bob = connect(ids["Bob"])
    bob.emit("join_group", {"groupId": group_id})
    bob.get_received()

    assert login("Bob").put(f"/api/groups/{group_id}", json={"name": "Nope"}).status_code == 403
    resp = login("Alice").put(f"/api/groups/{group_id}", json={"name": "Renamed"})
    assert resp.get_json()["name"] == "Renamed"
    assert received(bob, "groupUpdated")[0]["name"] == "Renamed"


def test_delete_removes_messages_and_dissolves_room(app, trio, login, connect, received):
    ids, group_id = trio
    alice = login("Alice")
    message_id = alice.post(f"/api/groups/{group_id}/message", json={"text": "bye"}).get_json()["id"]
    alice.post(f"/api/messages/{message_id}/react", json={"emoji": "👋"})
    bob = connect(ids["Bob"])
    bob.emit("join_group", {"groupId": group_id})
    bob.get_received()

    assert login("Bob").delete(f"/api/groups/{group_id}").status_code == 403
    assert alice.delete(f"/api/groups/{group_id}").status_code == 200
    assert received(bob, "groupDeleted") == [{"groupId": group_id}]
    assert dispatcher.channels.subscribers(group_id) == []
    assert alice.get(f"/api/groups/{group_id}").status_code == 404
    assert alice.post(f"/api/messages/{message_id}/read").status_code == 404
