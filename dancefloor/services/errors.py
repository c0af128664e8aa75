"""
Error types raised by the Dancefloor services.
Each carries the HTTP status the routes answer with; socket handlers turn
them into the matching error event for the sender.
"""


class QueueError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(QueueError):
    status_code = 400


class NotFound(QueueError):
    status_code = 404


class Conflict(QueueError):
    """Duplicate action, e.g. voting twice for the same request"""
    status_code = 400


class StoreFailure(QueueError):
    """Database error; the message is generic, details only go to the log"""
    status_code = 500
