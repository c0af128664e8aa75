"""
Small shared helpers for Dancefloor.
"""

import logging
from datetime import datetime, timezone
from flask import jsonify
from dancefloor.services.errors import QueueError


logger = logging.getLogger(__name__)


def utc_now():
    return datetime.now(timezone.utc)


def isoformat_utc(value):
    """Serialize a timestamp as ISO-8601 UTC (SQLite hands back naive datetimes)"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def error_response(status_code, message):
    """JSON error body shared by every route"""
    return jsonify({"error": message}), status_code


def service_error_response(e, fallback_message):
    """Map a service exception to a JSON error; anything unexpected becomes a 500"""
    if isinstance(e, QueueError):
        return error_response(e.status_code, e.message)
    logger.exception(f"Unexpected error: {e}")
    return error_response(500, fallback_message)
