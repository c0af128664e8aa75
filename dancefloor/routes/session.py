"""
Session routes for Dancefloor.
Exposes the signed-in DJ to the frontend.
"""

from flask import Blueprint, jsonify
from dancefloor.auth.principal import current_principal, sign_out


session_bp = Blueprint('session', __name__)


@session_bp.route("/session", methods=["GET"])
def get_session():
    """Current DJ, 401 when nobody is signed in"""
    principal = current_principal()
    if principal is None:
        return jsonify({"message": "No session found"}), 401
    return jsonify({"dj": principal.to_dict()})


@session_bp.route("/logout", methods=["POST"])
def logout():
    sign_out()
    return jsonify({"message": "Logged out successfully."})
