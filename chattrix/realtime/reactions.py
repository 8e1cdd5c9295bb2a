"""Reaction aggregation: at most one reaction per identity per message."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from chattrix.models import Message, MessageReaction

from .identity import Identity


def _existing(message: Message, identity: Identity) -> Optional[MessageReaction]:
    for reaction in message.reactions:
        if reaction.user_id == identity.user_id:
            return reaction
    return None


def add_reaction(session, message: Message, identity: Identity, emoji: str) -> MessageReaction:
    """Replace any reaction ``identity`` left on ``message`` with ``emoji``.

    The old row is removed and flushed before the new one is appended so the
    (message, user) unique constraint never sees both at once.
    """
    previous = _existing(message, identity)
    if previous is not None:
        message.reactions.remove(previous)
        session.flush()
    reaction = MessageReaction()
    reaction.user_id = identity.user_id
    reaction.emoji = emoji
    message.reactions.append(reaction)
    return reaction


def remove_reaction(message: Message, identity: Identity) -> bool:
    previous = _existing(message, identity)
    if previous is None:
        return False
    message.reactions.remove(previous)
    return True


def serialize_reactions(message: Message) -> List[Dict[str, Any]]:
    return [{"emoji": r.emoji, "userId": r.user_id} for r in message.reactions]
