from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from chattrix.models import User
from chattrix.schemas import MessageInput, ReactionInput, parse_payload
from chattrix.services import messages as message_service
from chattrix.services.serializers import serialize_message, serialize_user
from chattrix.routes._helpers import acting_identity, json_body

messages_bp = Blueprint("messages_bp", __name__)


@messages_bp.get("/users")
@login_required
def users_for_sidebar():
    me = acting_identity()
    users = User.query.filter(User.user_id != me.user_id).order_by(User.full_name.asc()).all()
    return jsonify([serialize_user(u) for u in users])


@messages_bp.get("/<int:user_id>")
@login_required
def conversation(user_id: int):
    rows = message_service.direct_history(acting_identity(), user_id)
    return jsonify([serialize_message(m) for m in rows])


@messages_bp.post("/send/<int:user_id>")
@login_required
def send_message(user_id: int):
    data = parse_payload(MessageInput, json_body())
    message = message_service.send_direct_message(acting_identity(), user_id, data)
    return jsonify(serialize_message(message)), 201


@messages_bp.post("/<int:message_id>/react")
@login_required
def react_to_message(message_id: int):
    data = parse_payload(ReactionInput, json_body())
    message = message_service.react(message_id, acting_identity(), data.emoji)
    return jsonify(serialize_message(message))


@messages_bp.delete("/<int:message_id>/react")
@login_required
def remove_reaction(message_id: int):
    message = message_service.unreact(message_id, acting_identity())
    return jsonify(serialize_message(message))


@messages_bp.post("/<int:message_id>/read")
@login_required
def mark_message_as_read(message_id: int):
    message, _changed = message_service.read_message(message_id, acting_identity())
    return jsonify(serialize_message(message))
