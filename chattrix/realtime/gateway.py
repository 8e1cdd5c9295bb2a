"""Socket.IO handlers for the relay.

Events (client -> server):
  connect            auth { userId } | ?userId= | Flask-Login session
  typing             { toUserId }
  stop_typing        { toUserId }
  group_typing       { groupId }
  group_stop_typing  { groupId }
  join_group         { groupId }
  leave_group        { groupId }
  message_delivered  { messageId }   accepted, no state change
  group_message_delivered, group_message_read
                     { messageId }   accepted and dropped; group messages
                                     have no per-member status
  message_read       { messageId }

Server emits are documented in ``chattrix.realtime.dispatcher``; socket-side
failures are reported to the caller only, as ``relay_error``.

The channel itself is not authenticated: whatever identity the client claims
at connect time is trusted. Only the HTTP write paths check credentials.
"""
from __future__ import annotations

from typing import Any, Optional

from flask import current_app, request, has_request_context
from flask_login import current_user
from flask_socketio import emit

from chattrix.errors import RelayError
from chattrix.extensions import dispatcher, socketio
from chattrix.realtime.identity import Identity
from chattrix.schemas import DirectSignal, MessageRef, RoomRef, parse_payload
from chattrix.services import messages as message_service


def _sid() -> Optional[str]:
    sid = getattr(request, "sid", None) if has_request_context() else None
    return sid if isinstance(sid, str) else None


def _handshake_identity(auth: Any) -> Optional[Identity]:
    raw = None
    if isinstance(auth, dict):
        raw = auth.get("userId", auth.get("user_id"))
    if raw is None:
        raw = request.args.get("userId")
    if raw is None and current_user.is_authenticated:
        raw = current_user.user_id
    return Identity.parse(raw)


def _parse(model, data, event: str):
    try:
        return parse_payload(model, data)
    except RelayError:
        current_app.logger.warning("%s with invalid payload from %s: %s", event, _sid(), data)
        return None


@socketio.on("connect")
def _on_connect(auth=None):  # type: ignore
    sid = _sid()
    if sid is None:
        current_app.logger.warning("Connect with invalid SID")
        return
    identity = _handshake_identity(auth)
    if dispatcher.connect(sid, identity):
        current_app.logger.info("Client %s connected as user %s", sid, identity)
    else:
        current_app.logger.debug("Client %s connected without identity", sid)


@socketio.on("disconnect")
def _on_disconnect(reason=None):  # type: ignore
    sid = _sid()
    if sid is None:
        current_app.logger.warning("Disconnect with invalid SID")
        return
    identity = dispatcher.disconnect(sid)
    if identity is not None:
        current_app.logger.info("Client %s (user %s) disconnected", sid, identity)
    else:
        # Orphaned by a newer connection for the same user, or never identified.
        current_app.logger.debug("SID %s not in presence registry during disconnect", sid)


def _relay_direct(event: str, data) -> None:
    signal = _parse(DirectSignal, data, event)
    if signal is None:
        return
    sender = dispatcher.registry.identity_of(_sid())
    dispatcher.signals.relay_direct(event, sender, Identity.parse(signal.to_user_id))


def _relay_group(event: str, data) -> None:
    ref = _parse(RoomRef, data, event)
    sid = _sid()
    if ref is None or sid is None:
        return
    sender = dispatcher.registry.identity_of(sid)
    dispatcher.signals.relay_group(event, sender, sid, ref.group_id)


@socketio.on("typing")
def _on_typing(data):  # type: ignore
    _relay_direct("typing", data)


@socketio.on("stop_typing")
def _on_stop_typing(data):  # type: ignore
    _relay_direct("stop_typing", data)


@socketio.on("group_typing")
def _on_group_typing(data):  # type: ignore
    _relay_group("group_typing", data)


@socketio.on("group_stop_typing")
def _on_group_stop_typing(data):  # type: ignore
    _relay_group("group_stop_typing", data)


@socketio.on("join_group")
def _on_join_group(data):  # type: ignore
    ref = _parse(RoomRef, data, "join_group")
    sid = _sid()
    if ref is None or sid is None:
        return
    dispatcher.join_room(sid, ref.group_id)
    current_app.logger.debug("Client %s joined group room %s", sid, ref.group_id)


@socketio.on("leave_group")
def _on_leave_group(data):  # type: ignore
    ref = _parse(RoomRef, data, "leave_group")
    sid = _sid()
    if ref is None or sid is None:
        return
    dispatcher.leave_room(sid, ref.group_id)


@socketio.on("message_delivered")
def _on_message_delivered(data):  # type: ignore
    ref = _parse(MessageRef, data, "message_delivered")
    if ref is None:
        return
    message_service.acknowledge_delivery(ref.message_id, dispatcher.registry.identity_of(_sid()))


@socketio.on("group_message_delivered")
@socketio.on("group_message_read")
def _on_group_message_notice(data):  # type: ignore
    # Group messages share one status field; per-member notices are dropped.
    ref = _parse(MessageRef, data, "group_message_notice")
    if ref is None:
        return
    current_app.logger.debug("Group notice for message %s from %s ignored", ref.message_id, _sid())


@socketio.on("message_read")
def _on_message_read(data):  # type: ignore
    ref = _parse(MessageRef, data, "message_read")
    if ref is None:
        return
    reader = dispatcher.registry.identity_of(_sid())
    try:
        message_service.read_message(ref.message_id, reader)
    except RelayError as exc:
        emit("relay_error", {"event": "message_read", "error": exc.message})
