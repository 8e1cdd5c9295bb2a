"""Group CRUD plumbing plus the room notifications that go with it."""
from __future__ import annotations

from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from chattrix.errors import ForbiddenError, NotFoundError, ValidationError
from chattrix.extensions import db, dispatcher
from chattrix.models import Group, Message, User, group_members
from chattrix.realtime.identity import Identity
from chattrix.schemas import GroupCreateInput, GroupUpdateInput
from chattrix.services.messages import latest_group_message
from chattrix.services.serializers import serialize_group


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def get_group(group_id: int) -> Group:
    group = db.session.get(Group, group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


def _require_admin(group: Group, actor: Identity, action: str) -> None:
    if group.admin_id != actor.user_id:
        raise ForbiddenError(f"Only admin can {action}")


def create_group(admin: Identity, data: GroupCreateInput) -> Group:
    member_ids = set(data.members)
    member_ids.add(admin.user_id)
    users = User.query.filter(User.user_id.in_(member_ids)).all()
    missing = member_ids - {u.user_id for u in users}
    if missing:
        raise ValidationError("Unknown member ids", details=sorted(missing))

    group = Group()
    group.name = data.name
    group.image = data.image or current_app.config.get("DEFAULT_GROUP_IMAGE")
    group.admin_id = admin.user_id
    group.members = sorted(users, key=lambda u: u.user_id)
    db.session.add(group)
    _commit()
    current_app.logger.info("Group %s created by %s with %d members", group.id, admin, len(users))
    return group


def groups_for(me: Identity) -> List[Tuple[Group, Optional[Message]]]:
    groups = (
        Group.query.join(group_members, group_members.c.group_id == Group.id)
        .filter(group_members.c.user_id == me.user_id)
        .order_by(Group.created_at.desc(), Group.id.desc())
        .all()
    )
    return [(g, latest_group_message(g.id)) for g in groups]


def group_details(group_id: int, me: Identity) -> Group:
    group = db.session.get(Group, group_id)
    if group is None or not group.has_member(me.user_id):
        raise NotFoundError("Group not found or you are not a member")
    return group


def add_member(group_id: int, actor: Identity, member_id: int) -> Group:
    group = get_group(group_id)
    _require_admin(group, actor, "add members")
    user = db.session.get(User, member_id)
    if user is None:
        raise NotFoundError("User not found")
    if group.has_member(member_id):
        raise ValidationError("Member already in group")
    group.members.append(user)
    _commit()
    return group


def remove_member(group_id: int, actor: Identity, member_id: int) -> Group:
    group = get_group(group_id)
    _require_admin(group, actor, "remove members")
    if member_id == group.admin_id:
        raise ValidationError("Cannot remove group admin")
    group.members = [m for m in group.members if m.user_id != member_id]
    _commit()
    return group


def leave_group(group_id: int, actor: Identity) -> None:
    group = get_group(group_id)
    if group.admin_id == actor.user_id:
        raise ValidationError(
            "Group admin cannot leave. Please delete the group or transfer admin rights first."
        )
    if not group.has_member(actor.user_id):
        raise ForbiddenError("You are not a member of this group")
    group.members = [m for m in group.members if m.user_id != actor.user_id]
    _commit()
    dispatcher.notify_room(group_id, "memberLeft", {"groupId": group_id, "userId": actor.user_id})


def update_group(group_id: int, actor: Identity, data: GroupUpdateInput) -> Group:
    group = get_group(group_id)
    _require_admin(group, actor, "update the group")
    if data.name:
        group.name = data.name
    if data.image:
        group.image = data.image
    _commit()
    dispatcher.notify_room(group_id, "groupUpdated", serialize_group(group))
    return group


def delete_group(group_id: int, actor: Identity) -> None:
    group = get_group(group_id)
    _require_admin(group, actor, "delete the group")
    # ORM deletes so reaction rows cascade with their messages
    for message in Message.query.filter(Message.group_id == group_id).all():
        db.session.delete(message)
    db.session.delete(group)
    _commit()
    dispatcher.dissolve_room(group_id)
    current_app.logger.info("Group %s deleted by %s", group_id, actor)
