from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from chattrix.schemas import GroupCreateInput, GroupUpdateInput, MemberInput, MessageInput, parse_payload
from chattrix.services import groups as group_service
from chattrix.services import messages as message_service
from chattrix.services.serializers import hydrate_message, serialize_group
from chattrix.routes._helpers import acting_identity, json_body

groups_bp = Blueprint("groups_bp", __name__)


@groups_bp.post("")
@login_required
def create_group():
    data = parse_payload(GroupCreateInput, json_body())
    group = group_service.create_group(acting_identity(), data)
    return jsonify(serialize_group(group)), 201


@groups_bp.get("")
@login_required
def list_groups():
    payload = []
    for group, last in group_service.groups_for(acting_identity()):
        entry = serialize_group(group, last_message=last)
        entry.setdefault("lastMessage", None)
        payload.append(entry)
    return jsonify(payload)


@groups_bp.get("/<int:group_id>/details")
@login_required
def group_details(group_id: int):
    group = group_service.group_details(group_id, acting_identity())
    return jsonify(serialize_group(group))


@groups_bp.get("/<int:group_id>")
@login_required
def get_group(group_id: int):
    return jsonify(serialize_group(group_service.get_group(group_id)))


@groups_bp.post("/<int:group_id>/add-member")
@login_required
def add_member(group_id: int):
    data = parse_payload(MemberInput, json_body())
    group = group_service.add_member(group_id, acting_identity(), data.member_id)
    return jsonify(serialize_group(group))


@groups_bp.post("/<int:group_id>/remove-member")
@login_required
def remove_member(group_id: int):
    data = parse_payload(MemberInput, json_body())
    group = group_service.remove_member(group_id, acting_identity(), data.member_id)
    return jsonify(serialize_group(group))


@groups_bp.post("/<int:group_id>/message")
@login_required
def send_group_message(group_id: int):
    data = parse_payload(MessageInput, json_body())
    message = message_service.send_group_message(acting_identity(), group_id, data)
    return jsonify(hydrate_message(message)), 201


@groups_bp.get("/<int:group_id>/messages")
@login_required
def group_messages(group_id: int):
    rows = message_service.group_history(acting_identity(), group_id)
    return jsonify([hydrate_message(m) for m in rows])


@groups_bp.put("/<int:group_id>")
@login_required
def update_group(group_id: int):
    data = parse_payload(GroupUpdateInput, json_body())
    group = group_service.update_group(group_id, acting_identity(), data)
    return jsonify(serialize_group(group))


@groups_bp.delete("/<int:group_id>")
@login_required
def delete_group(group_id: int):
    group_service.delete_group(group_id, acting_identity())
    return jsonify({"message": "Group deleted successfully"})


@groups_bp.post("/<int:group_id>/leave")
@login_required
def leave_group(group_id: int):
    group_service.leave_group(group_id, acting_identity())
    return jsonify({"message": "Left group successfully"})
