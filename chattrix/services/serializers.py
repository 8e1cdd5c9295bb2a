from __future__ import annotations

from typing import Any, Dict, Optional

from chattrix.extensions import db
from chattrix.models import Group, Message, User
from chattrix.realtime.reactions import serialize_reactions


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_user(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if not user:
        return None
    return {
        "id": user.user_id,
        "fullName": user.display_name,
        "email": user.email,
        "profilePic": user.profile_pic,
        "createdAt": _iso(user.created_timestamp),
    }


def sender_profile(user: User) -> Dict[str, Any]:
    """Minimal profile attached to pushed messages."""
    return {
        "id": user.user_id,
        "fullName": user.display_name,
        "profilePic": user.profile_pic,
    }


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "senderId": message.sender_id,
        "receiverId": message.receiver_id,
        "groupId": message.group_id,
        "text": message.text,
        "image": message.image,
        "status": message.status,
        "seenAt": _iso(message.seen_at),
        "reactions": serialize_reactions(message),
        "createdAt": _iso(message.created_at),
        "updatedAt": _iso(message.updated_at),
    }


def hydrate_message(message: Message) -> Dict[str, Any]:
    """Serialize ``message`` with its sender profile; reads the store.

    Raises LookupError when the sender row is gone.
    """
    sender = db.session.get(User, message.sender_id)
    if sender is None:
        raise LookupError(f"sender {message.sender_id} not found")
    payload = serialize_message(message)
    payload["sender"] = sender_profile(sender)
    return payload


def serialize_group(group: Group, *, last_message: Optional[Message] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": group.id,
        "name": group.name,
        "image": group.image,
        "admin": serialize_user(group.admin),
        "members": [serialize_user(m) for m in group.members],
        "createdAt": _iso(group.created_at),
    }
    if last_message is not None:
        sender = last_message.sender
        payload["lastMessage"] = {
            "text": last_message.text,
            "createdAt": _iso(last_message.created_at),
            "sender": sender_profile(sender) if sender else None,
        }
    return payload
