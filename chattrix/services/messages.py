"""Direct and group message operations.

Every mutation commits before anything is pushed. A failed commit is rolled
back and re-raised so the caller sees the error and nobody gets a push for a
row that does not exist.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from chattrix.errors import ForbiddenError, NotFoundError, ValidationError
from chattrix.extensions import db, dispatcher
from chattrix.models import Group, Message, User
from chattrix.realtime.delivery import MessageStatus, mark_read
from chattrix.realtime.identity import Identity
from chattrix.realtime.reactions import add_reaction, remove_reaction, serialize_reactions
from chattrix.schemas import MessageInput

logger = logging.getLogger(__name__)


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _check_length(data: MessageInput) -> None:
    limit = int(current_app.config.get("MAX_TEXT_LENGTH", 4000))
    if data.text and len(data.text) > limit:
        raise ValidationError(f"Message text exceeds {limit} characters")


def get_message(message_id: int) -> Message:
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return message


def _new_message(sender: Identity, data: MessageInput) -> Message:
    message = Message()
    message.sender_id = sender.user_id
    message.text = data.text
    message.image = data.image
    message.status = MessageStatus.SENT.value
    return message


def send_direct_message(sender: Identity, receiver_id: int, data: MessageInput) -> Message:
    _check_length(data)
    if db.session.get(User, receiver_id) is None:
        raise NotFoundError("Recipient not found")
    message = _new_message(sender, data)
    message.receiver_id = receiver_id
    db.session.add(message)
    _commit()
    pushed = dispatcher.deliver_message(message)
    logger.debug("Message %s stored (%s -> %s), pushed=%d", message.id, sender, receiver_id, pushed)
    return message


def send_group_message(sender: Identity, group_id: int, data: MessageInput) -> Message:
    _check_length(data)
    group = db.session.get(Group, group_id)
    if group is None:
        raise NotFoundError("Group not found")
    if not group.has_member(sender.user_id):
        raise ForbiddenError("You are not a member of this group")
    message = _new_message(sender, data)
    message.group_id = group_id
    db.session.add(message)
    _commit()
    pushed = dispatcher.deliver_message(message)
    logger.debug("Group message %s stored in group %s, pushed=%d", message.id, group_id, pushed)
    return message


def direct_history(me: Identity, other_id: int) -> List[Message]:
    """Both directions of a one-to-one conversation, oldest first."""
    return (
        Message.query.filter(
            Message.group_id.is_(None),
            or_(
                and_(Message.sender_id == me.user_id, Message.receiver_id == other_id),
                and_(Message.sender_id == other_id, Message.receiver_id == me.user_id),
            ),
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def group_history(me: Identity, group_id: int) -> List[Message]:
    group = db.session.get(Group, group_id)
    if group is None:
        raise NotFoundError("Group not found")
    if not group.has_member(me.user_id):
        raise ForbiddenError("You are not a member of this group")
    return (
        Message.query.filter(Message.group_id == group_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def latest_group_message(group_id: int) -> Optional[Message]:
    return (
        Message.query.filter(Message.group_id == group_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .first()
    )


def react(message_id: int, actor: Identity, emoji: str) -> Message:
    message = get_message(message_id)
    add_reaction(db.session, message, actor, emoji)
    _commit()
    dispatcher.push_reactions(message, actor, serialize_reactions(message))
    return message


def unreact(message_id: int, actor: Identity) -> Message:
    message = get_message(message_id)
    if remove_reaction(message, actor):
        _commit()
        dispatcher.push_reactions(message, actor, serialize_reactions(message))
    return message


def read_message(message_id: int, reader: Identity) -> Tuple[Message, bool]:
    """Mark a direct message read; only the first transition notifies the sender."""
    message = get_message(message_id)
    changed = mark_read(message, reader)
    if changed:
        _commit()
        dispatcher.push_status(message)
    return message, changed


def acknowledge_delivery(message_id: int, reader: Optional[Identity]) -> None:
    # 'delivered' has no transition; the notice is accepted and dropped.
    logger.debug("Delivery notice for message %s from %s ignored", message_id, reader)
