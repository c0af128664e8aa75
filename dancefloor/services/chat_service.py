"""
Chat relay for Dancefloor.
Messages are append-only: insert, bump the dancefloor counter, broadcast.
"""

import logging
from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from dancefloor.models import get_db, DJ, Dancefloor, Message, MAX_MESSAGE_LENGTH
from dancefloor.services.errors import ValidationError, NotFound, StoreFailure
from dancefloor.websockets import events


logger = logging.getLogger(__name__)


def validate_message(message):
    """Reject empty or oversized messages; never truncate"""
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Message cannot be empty.")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message exceeds maximum length of {MAX_MESSAGE_LENGTH} characters.")
    return message


class ChatService:

    def __init__(self, hub, session_scope=get_db):
        self.hub = hub
        self.session_scope = session_scope

    def post(self, dancefloor_id, message, author_id=None):
        """Store a chat message and broadcast it with the new message count"""
        message = validate_message(message)
        if not dancefloor_id:
            raise ValidationError("Missing dancefloor id.")

        try:
            with self.session_scope() as db:
                messages_count = Dancefloor.increment_counter(db, dancefloor_id, "messages_count")
                if messages_count is None:
                    raise NotFound("Dancefloor not found.")

                chat_message = Message(
                    dancefloor_id=dancefloor_id,
                    message=message,
                    author_id=self._known_author(db, author_id),
                )
                db.add(chat_message)
                db.flush()
                payload = chat_message.to_dict()
        except SQLAlchemyError:
            logger.exception(f"[CHAT] Failed to save message for dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to send message.")

        self.hub.publish(dancefloor_id, events.SEND_MESSAGE, payload)
        self.hub.publish(dancefloor_id, events.UPDATE_MESSAGES_COUNT, {"messagesCount": messages_count})
        return payload, messages_count

    @staticmethod
    def _known_author(db, author_id):
        """Only DJs are stored as authors; attendees post anonymously"""
        if not author_id:
            return None
        if db.query(DJ.id).filter(DJ.id == str(author_id)).first() is None:
            logger.debug(f"[CHAT] Author {author_id} is not a DJ, posting anonymously")
            return None
        return str(author_id)

    def history(self, dancefloor_id):
        """All messages of a dancefloor, oldest first"""
        try:
            with self.session_scope() as db:
                messages = (
                    db.query(Message)
                    .filter(Message.dancefloor_id == dancefloor_id)
                    .order_by(asc(Message.created_at), asc(Message.id))
                    .all()
                )
                return [message.to_dict() for message in messages]
        except SQLAlchemyError:
            logger.exception(f"[CHAT] Failed to load messages for dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to fetch messages.")
