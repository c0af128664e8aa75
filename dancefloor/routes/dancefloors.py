"""
Dancefloor routes for Dancefloor.
Handles starting/stopping sessions, session details and chat messages.
"""

from flask import Blueprint, current_app, request, jsonify
from dancefloor.auth.principal import current_principal
from dancefloor.utils.helpers import service_error_response


dancefloors_bp = Blueprint('dancefloors', __name__)


def _dj_id_from_request(data):
    dj_id = data.get("djId")
    if dj_id:
        return dj_id
    principal = current_principal()
    return principal.id if principal else None


@dancefloors_bp.route("/start-dancefloor", methods=["POST"])
def start_dancefloor():
    """Start a dancefloor for the DJ, completing any active one"""
    data = request.get_json(silent=True) or {}
    try:
        dancefloor_id = current_app.dancefloor_service.start(_dj_id_from_request(data))
    except Exception as e:
        return service_error_response(e, "Failed to start dancefloor.")
    return jsonify({"dancefloorId": dancefloor_id})


@dancefloors_bp.route("/stop-dancefloor", methods=["POST"])
def stop_dancefloor():
    data = request.get_json(silent=True) or {}
    try:
        stopped = current_app.dancefloor_service.stop(_dj_id_from_request(data))
    except Exception as e:
        return service_error_response(e, "Failed to stop dancefloor.")
    message = "Dancefloor stopped." if stopped else "No active dancefloor."
    return jsonify({"message": message, "stopped": stopped})


@dancefloors_bp.route("/dancefloor/<dancefloor_id>", methods=["GET"])
def get_dancefloor_details(dancefloor_id):
    """Dancefloor with its song requests and messages, for late joiners"""
    try:
        details = current_app.dancefloor_service.details(dancefloor_id)
    except Exception as e:
        return service_error_response(e, "Failed to fetch dancefloor.")
    return jsonify(details)


@dancefloors_bp.route("/dancefloor/<dancefloor_id>/messages", methods=["GET"])
def get_messages(dancefloor_id):
    try:
        messages = current_app.chat_service.history(dancefloor_id)
    except Exception as e:
        return service_error_response(e, "Failed to fetch messages.")
    return jsonify(messages)


@dancefloors_bp.route("/dancefloor/<dancefloor_id>/messages", methods=["POST"])
def post_message(dancefloor_id):
    """Post a chat message (max 300 characters)"""
    data = request.get_json(silent=True) or {}
    author_id = data.get("authorId")
    if not author_id:
        principal = current_principal()
        author_id = principal.id if principal else None
    try:
        message, messages_count = current_app.chat_service.post(dancefloor_id, data.get("message"), author_id)
    except Exception as e:
        return service_error_response(e, "Failed to send message.")
    return jsonify({**message, "messagesCount": messages_count}), 201


@dancefloors_bp.route("/dj/<dj_id>/past-dancefloors", methods=["GET"])
def get_past_dancefloors(dj_id):
    try:
        dancefloors = current_app.dancefloor_service.past_dancefloors(dj_id)
    except Exception as e:
        return service_error_response(e, "Failed to fetch past dancefloors.")
    return jsonify(dancefloors)
