"""
Socket.IO event handlers for Dancefloor.
Handles real-time joins, song requests, votes, status changes and chat.

Handlers only translate socket payloads into engine/service calls; the
broadcasts themselves come from the services. Failures go back to the
sender as an error event and never close the connection.
"""

import logging
from flask import request
from flask_socketio import emit
from dancefloor.services.errors import QueueError
from dancefloor.websockets import events


logger = logging.getLogger(__name__)


def _dancefloor_id_from(data):
    """joinDancefloor accepts either the bare id or {dancefloorId}"""
    if isinstance(data, dict):
        return data.get("dancefloorId")
    if isinstance(data, str):
        return data.strip()
    return None


def _report(hub, error_event, e, fallback_message):
    if isinstance(e, QueueError):
        message = e.message
    else:
        logger.exception(f"[SOCKET] Unexpected error ({error_event}): {e}")
        message = fallback_message
    hub.send(request.sid, error_event, {"message": message})


def register_handlers(socketio, hub, queue_engine, chat_service):
    """Register all Socket.IO event handlers"""

    @socketio.on("connect")
    def handle_connect(auth=None):
        logger.info(f"[CONNECTION] A user connected: {request.sid}")
        emit("connected", {"sid": request.sid})

    @socketio.on("disconnect")
    def handle_disconnect(reason=None):
        left = hub.leave_all(request.sid)
        logger.info(f"[DISCONNECTION] User disconnected: {request.sid} (reason: {reason}, groups: {len(left)})")

    @socketio.on_error_default
    def default_error_handler(e):
        logger.error(f"[SOCKET ERROR] {request.event}: {e}")

    @socketio.on(events.JOIN_DANCEFLOOR)
    def handle_join_dancefloor(data=None):
        dancefloor_id = _dancefloor_id_from(data)
        if not hub.join(request.sid, dancefloor_id):
            return
        hub.publish(dancefloor_id, events.JOIN_NOTICE, f"User {request.sid} has joined the dancefloor")

    @socketio.on(events.SONG_REQUEST)
    def handle_song_request(data=None):
        data = data or {}
        try:
            queue_engine.submit(data.get("dancefloorId"), data.get("requesterId") or request.sid, data.get("song"))
        except Exception as e:
            _report(hub, events.SONG_REQUEST_ERROR, e, "Failed to save song request.")

    @socketio.on(events.SEND_MESSAGE)
    def handle_send_message(data=None):
        data = data or {}
        try:
            chat_service.post(data.get("dancefloorId"), data.get("message"), data.get("authorId"))
        except Exception as e:
            _report(hub, events.MESSAGE_ERROR, e, "Failed to send message.")

    @socketio.on(events.STATUS_UPDATE)
    def handle_status_update(data=None):
        data = data or {}
        try:
            # The stored dancefloor decides the group, not the client's dancefloorId
            queue_engine.set_status(data.get("requestId"), data.get("status"))
        except Exception as e:
            _report(hub, events.STATUS_UPDATE_ERROR, e, "Failed to update song status.")

    @socketio.on(events.LIKE_SONG_REQUEST)
    def handle_like_song_request(data=None):
        data = data or {}
        try:
            queue_engine.vote(data.get("requestId"), data.get("voterId") or request.sid)
        except Exception as e:
            _report(hub, events.LIKE_ERROR, e, "Failed to like song request.")
