"""
Song request routes for Dancefloor.
Handles submitting, listing, voting, status changes and manual reordering.
"""

from flask import Blueprint, current_app, request, jsonify
from dancefloor.auth.principal import current_voter_id
from dancefloor.models import STATUS_PLAYING, STATUS_COMPLETED, STATUS_DECLINED
from dancefloor.utils.helpers import service_error_response


song_requests_bp = Blueprint('song_requests', __name__)


@song_requests_bp.route("/dancefloor/<dancefloor_id>/song-requests", methods=["GET"])
def list_song_requests(dancefloor_id):
    """Song requests ordered by votes (default) or by manual order key"""
    sort = request.args.get("sort", "votes")
    try:
        song_requests = current_app.queue_engine.list_requests(dancefloor_id, sort=sort)
    except Exception as e:
        return service_error_response(e, "Failed to fetch song requests.")
    return jsonify(song_requests)


@song_requests_bp.route("/dancefloor/<dancefloor_id>/song-requests", methods=["POST"])
def submit_song_request(dancefloor_id):
    """Submit a new song request"""
    data = request.get_json(silent=True) or {}
    requester_id = data.get("requesterId") or current_voter_id()
    try:
        song_request, requests_count = current_app.queue_engine.submit(
            dancefloor_id, requester_id, data.get("song")
        )
    except Exception as e:
        return service_error_response(e, "Failed to save song request.")
    return jsonify({**song_request, "requestsCount": requests_count}), 201


def _set_status(request_id, status):
    try:
        current_app.queue_engine.set_status(request_id, status)
    except Exception as e:
        return service_error_response(e, "Failed to update song status.")
    return jsonify({"message": f"Song request marked as {status}."})


@song_requests_bp.route("/song-request/<request_id>/status", methods=["POST", "PUT"])
def update_song_request_status(request_id):
    data = request.get_json(silent=True) or {}
    return _set_status(request_id, data.get("status"))


@song_requests_bp.route("/song-request/<request_id>/play", methods=["PUT"])
def play_song_request(request_id):
    """Mark as playing; whatever was playing goes back to the queue"""
    return _set_status(request_id, STATUS_PLAYING)


@song_requests_bp.route("/song-request/<request_id>/complete", methods=["PUT"])
def complete_song_request(request_id):
    return _set_status(request_id, STATUS_COMPLETED)


@song_requests_bp.route("/song-request/<request_id>/decline", methods=["PUT"])
def decline_song_request(request_id):
    return _set_status(request_id, STATUS_DECLINED)


@song_requests_bp.route("/song-request/<request_id>/vote", methods=["PUT"])
@song_requests_bp.route("/song-request/<request_id>/like", methods=["PUT"])
def vote_song_request(request_id):
    """One vote per voter; a second vote answers 400"""
    data = request.get_json(silent=True) or {}
    voter_id = data.get("voterId") or current_voter_id()
    try:
        votes = current_app.queue_engine.vote(request_id, voter_id)
    except Exception as e:
        return service_error_response(e, "Failed to like song request.")
    return jsonify({"message": "Like added successfully.", "votes": votes, "likes": votes})


@song_requests_bp.route("/dancefloor/<dancefloor_id>/reorder", methods=["PUT"])
def reorder_song_requests(dancefloor_id):
    """Apply {requestId, newOrder} pairs; ids from other dancefloors are ignored"""
    data = request.get_json(silent=True) or {}
    try:
        current_app.queue_engine.reorder(dancefloor_id, data.get("order"))
    except Exception as e:
        return service_error_response(e, "Failed to reorder song requests.")
    return jsonify({"message": "Song requests reordered successfully."})
