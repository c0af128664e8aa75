"""
Dancefloor lifecycle for Dancefloor.
Starting, stopping and reading back a DJ's sessions.
"""

import logging
from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError
from dancefloor.models import (
    get_db,
    DJ,
    Dancefloor,
    SongRequest,
    Message,
    DANCEFLOOR_ACTIVE,
    DANCEFLOOR_COMPLETED,
)
from dancefloor.services.errors import ValidationError, NotFound, StoreFailure
from dancefloor.utils.helpers import utc_now


logger = logging.getLogger(__name__)


class DancefloorService:

    def __init__(self, session_scope=get_db):
        self.session_scope = session_scope

    def start(self, dj_id):
        """Open a new active dancefloor, closing the DJ's current one first"""
        if not dj_id:
            raise ValidationError("Missing DJ id.")

        try:
            with self.session_scope() as db:
                dj = db.query(DJ).filter(DJ.id == dj_id).with_for_update().first()
                if dj is None:
                    raise NotFound("DJ not found.")

                closed = self._complete_active(db, dj_id)
                dancefloor = Dancefloor(dj_id=dj_id, status=DANCEFLOOR_ACTIVE)
                db.add(dancefloor)
                db.flush()
                dancefloor_id = dancefloor.id
        except SQLAlchemyError:
            logger.exception(f"[DANCEFLOOR] Failed to start dancefloor for DJ {dj_id}")
            raise StoreFailure("Failed to start dancefloor.")

        logger.info(f"[DANCEFLOOR] DJ {dj_id} started {dancefloor_id} (closed {closed})")
        return dancefloor_id

    def stop(self, dj_id):
        """Complete the DJ's active dancefloor, True if there was one"""
        if not dj_id:
            raise ValidationError("Missing DJ id.")

        try:
            with self.session_scope() as db:
                closed = self._complete_active(db, dj_id)
        except SQLAlchemyError:
            logger.exception(f"[DANCEFLOOR] Failed to stop dancefloor for DJ {dj_id}")
            raise StoreFailure("Failed to stop dancefloor.")

        logger.info(f"[DANCEFLOOR] DJ {dj_id} stopped {closed} dancefloor(s)")
        return closed > 0

    @staticmethod
    def _complete_active(db, dj_id):
        closed = (
            db.query(Dancefloor)
            .filter(Dancefloor.dj_id == dj_id, Dancefloor.status == DANCEFLOOR_ACTIVE)
            .update(
                {Dancefloor.status: DANCEFLOOR_COMPLETED, Dancefloor.ended_at: utc_now()},
                synchronize_session=False,
            )
        )
        db.flush()
        return closed

    def details(self, dancefloor_id):
        """Dancefloor row plus its requests (creation order) and messages"""
        try:
            with self.session_scope() as db:
                dancefloor = db.query(Dancefloor).filter(Dancefloor.id == dancefloor_id).first()
                if dancefloor is None:
                    raise NotFound("Dancefloor not found.")

                song_requests = (
                    db.query(SongRequest)
                    .filter(SongRequest.dancefloor_id == dancefloor_id)
                    .order_by(asc(SongRequest.created_at))
                    .all()
                )
                messages = (
                    db.query(Message)
                    .filter(Message.dancefloor_id == dancefloor_id)
                    .order_by(asc(Message.created_at), asc(Message.id))
                    .all()
                )

                data = dancefloor.to_dict()
                data["songRequests"] = [song_request.to_dict() for song_request in song_requests]
                data["messages"] = [message.to_dict() for message in messages]
                return data
        except SQLAlchemyError:
            logger.exception(f"[DANCEFLOOR] Failed to fetch dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to fetch dancefloor.")

    def past_dancefloors(self, dj_id):
        """Completed dancefloors of a DJ, newest first"""
        try:
            with self.session_scope() as db:
                dancefloors = (
                    db.query(Dancefloor)
                    .filter(Dancefloor.dj_id == dj_id, Dancefloor.status == DANCEFLOOR_COMPLETED)
                    .order_by(desc(Dancefloor.created_at))
                    .all()
                )
                return [dancefloor.to_dict() for dancefloor in dancefloors]
        except SQLAlchemyError:
            logger.exception(f"[DANCEFLOOR] Failed to fetch past dancefloors for DJ {dj_id}")
            raise StoreFailure("Failed to fetch past dancefloors.")
