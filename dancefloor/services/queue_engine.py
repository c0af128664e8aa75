"""
Song request queue engine for Dancefloor.

All queue mutations go through here, whichever transport they came in on
(HTTP routes or Socket.IO events). Every operation runs in a single unit of
work and only publishes to the broadcast hub after the commit succeeded, so
clients never see state that was rolled back.
"""

import logging
import threading
from sqlalchemy import asc, desc, nullslast
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from dancefloor.models import (
    get_db,
    Dancefloor,
    SongRequest,
    Vote,
    REQUEST_STATUSES,
    STATUS_QUEUED,
    STATUS_PLAYING,
)
from dancefloor.services.errors import ValidationError, NotFound, Conflict, StoreFailure
from dancefloor.websockets import events


logger = logging.getLogger(__name__)

SORT_BY_VOTES = "votes"
SORT_BY_ORDER = "order"
SORT_MODES = (SORT_BY_VOTES, SORT_BY_ORDER)


class QueueEngine:
    """Applies song request mutations and publishes the resulting events"""

    def __init__(self, hub, session_scope=get_db):
        self.hub = hub
        self.session_scope = session_scope
        # Status changes on one dancefloor commit and publish in the same order
        self._dancefloor_locks = {}
        self._dancefloor_locks_guard = threading.Lock()

    def _dancefloor_lock(self, dancefloor_id):
        with self._dancefloor_locks_guard:
            return self._dancefloor_locks.setdefault(dancefloor_id, threading.Lock())

    def submit(self, dancefloor_id, requester_id, song):
        """Create a queued request and bump the dancefloor's request counter.

        Returns ``(request_dict, requests_count)``.
        """
        if not isinstance(song, str) or not song.strip():
            raise ValidationError("Song request cannot be empty.")
        song = song.strip()
        if not dancefloor_id:
            raise ValidationError("Missing dancefloor id.")

        try:
            with self.session_scope() as db:
                requests_count = Dancefloor.increment_counter(db, dancefloor_id, "requests_count")
                if requests_count is None:
                    raise NotFound("Dancefloor not found.")

                song_request = SongRequest(
                    dancefloor_id=dancefloor_id,
                    requester_id=requester_id,
                    song=song,
                    votes=0,
                    status=STATUS_QUEUED,
                    sort_order=requests_count,
                )
                db.add(song_request)
                db.flush()
                payload = song_request.to_dict()
        except SQLAlchemyError:
            logger.exception(f"[SUBMIT] Failed to save song request for dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to save song request.")

        logger.info(f"[SUBMIT] {requester_id} requested '{song}' on dancefloor {dancefloor_id} (id={payload['id']})")

        self.hub.publish(dancefloor_id, events.SONG_REQUEST, payload)
        self.hub.publish(dancefloor_id, events.UPDATE_REQUESTS_COUNT, {"requestsCount": requests_count})
        return payload, requests_count

    def vote(self, request_id, voter_id):
        """Count one vote per voter per request and return the new total"""
        if not request_id:
            raise ValidationError("Missing song request id.")
        if not voter_id:
            raise ValidationError("Missing voter id.")
        voter_id = str(voter_id)

        try:
            with self.session_scope() as db:
                song_request = db.query(SongRequest).filter(SongRequest.id == request_id).first()
                if song_request is None:
                    raise NotFound("Song request not found.")

                already_voted = (
                    db.query(Vote)
                    .filter(Vote.voter_id == voter_id, Vote.song_request_id == request_id)
                    .first()
                )
                if already_voted is not None:
                    raise Conflict("You have already voted for this song request.")

                db.add(Vote(voter_id=voter_id, song_request_id=request_id))
                db.flush()

                db.query(SongRequest).filter(SongRequest.id == request_id).update(
                    {SongRequest.votes: SongRequest.votes + 1}, synchronize_session=False
                )
                votes = db.query(SongRequest.votes).filter(SongRequest.id == request_id).scalar()
                dancefloor_id = song_request.dancefloor_id
        except IntegrityError:
            # Lost the race against the same voter's concurrent vote
            logger.info(f"[VOTE] Duplicate vote from {voter_id} on {request_id} rejected by the store")
            raise Conflict("You have already voted for this song request.")
        except SQLAlchemyError:
            logger.exception(f"[VOTE] Failed to record vote from {voter_id} on {request_id}")
            raise StoreFailure("Failed to like song request.")

        logger.info(f"[VOTE] {voter_id} voted for {request_id}, total {votes}")

        self.hub.publish(dancefloor_id, events.LIKE_SONG_REQUEST, {"requestId": request_id, "likes": votes})
        return votes

    def set_status(self, request_id, status):
        """Move a request to ``status``.

        Playing is exclusive per dancefloor: whatever was playing goes back to
        queued in the same transaction. Returns ``(dancefloor_id, status)``.
        """
        if status not in REQUEST_STATUSES:
            raise ValidationError("Invalid status value.")
        if not request_id:
            raise ValidationError("Missing song request id.")

        dancefloor_id = self._dancefloor_of(request_id)
        with self._dancefloor_lock(dancefloor_id):
            try:
                with self.session_scope() as db:
                    song_request = db.query(SongRequest).filter(SongRequest.id == request_id).first()
                    if song_request is None:
                        raise NotFound("Song request not found.")

                    demoted = []
                    if status == STATUS_PLAYING:
                        demoted = self._demote_playing(db, dancefloor_id, exclude_id=request_id)
                    self._apply_status(db, song_request, status)
            except SQLAlchemyError:
                logger.exception(f"[STATUS] Failed to set {request_id} to {status}")
                raise StoreFailure("Failed to update song status.")

            for demoted_id in demoted:
                logger.info(f"[STATUS] {demoted_id} returned to {STATUS_QUEUED}")
                self.hub.publish(dancefloor_id, events.STATUS_UPDATE, {"requestId": demoted_id, "status": STATUS_QUEUED})

            logger.info(f"[STATUS] {request_id} changed to {status}")
            self.hub.publish(dancefloor_id, events.STATUS_UPDATE, {"requestId": request_id, "status": status})
        return dancefloor_id, status

    def _dancefloor_of(self, request_id):
        try:
            with self.session_scope() as db:
                dancefloor_id = (
                    db.query(SongRequest.dancefloor_id).filter(SongRequest.id == request_id).scalar()
                )
        except SQLAlchemyError:
            logger.exception(f"[STATUS] Failed to look up {request_id}")
            raise StoreFailure("Failed to update song status.")
        if dancefloor_id is None:
            raise NotFound("Song request not found.")
        return dancefloor_id

    def _demote_playing(self, db, dancefloor_id, exclude_id):
        # Locking the parent row serializes concurrent plays on this dancefloor,
        # including the case where nothing is playing yet.
        db.query(Dancefloor).filter(Dancefloor.id == dancefloor_id).with_for_update().one()

        playing = (
            db.query(SongRequest)
            .filter(
                SongRequest.dancefloor_id == dancefloor_id,
                SongRequest.status == STATUS_PLAYING,
                SongRequest.id != exclude_id,
            )
            .with_for_update()
            .all()
        )
        for song_request in playing:
            song_request.status = STATUS_QUEUED
        # Demotions must reach the store before the promotion or the
        # one-playing index trips
        db.flush()
        return [song_request.id for song_request in playing]

    def _apply_status(self, db, song_request, status):
        song_request.status = status
        db.flush()

    def reorder(self, dancefloor_id, order):
        """Apply manual ordering keys.

        Ids that do not belong to ``dancefloor_id`` are skipped without error.
        Returns the pairs that were applied.
        """
        pairs = self._parse_order(order)

        applied = []
        try:
            with self.session_scope() as db:
                for request_id, new_order in pairs:
                    updated = (
                        db.query(SongRequest)
                        .filter(SongRequest.id == request_id, SongRequest.dancefloor_id == dancefloor_id)
                        .update({SongRequest.sort_order: new_order}, synchronize_session=False)
                    )
                    if updated:
                        applied.append({"requestId": request_id, "newOrder": new_order})
        except SQLAlchemyError:
            logger.exception(f"[REORDER] Failed to reorder dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to reorder song requests.")

        skipped = len(pairs) - len(applied)
        logger.info(f"[REORDER] Dancefloor {dancefloor_id}: {len(applied)} applied, {skipped} ignored")

        if applied:
            self.hub.publish(dancefloor_id, events.REORDER_REQUESTS, {"order": applied})
        return applied

    @staticmethod
    def _parse_order(order):
        if not isinstance(order, list):
            raise ValidationError("Order must be a list of {requestId, newOrder} entries.")

        # A repeated requestId keeps its last newOrder
        latest = {}
        for entry in order:
            if not isinstance(entry, dict):
                raise ValidationError("Order must be a list of {requestId, newOrder} entries.")
            request_id = entry.get("requestId")
            new_order = entry.get("newOrder")
            if not isinstance(request_id, str) or not request_id:
                raise ValidationError("Each entry needs a requestId and an integer newOrder.")
            # bool is an int subclass, reject it explicitly
            if isinstance(new_order, bool) or not isinstance(new_order, int):
                raise ValidationError("Each entry needs a requestId and an integer newOrder.")
            latest[request_id] = new_order
        return list(latest.items())

    def list_requests(self, dancefloor_id, sort=SORT_BY_VOTES):
        """Requests of a dancefloor, most voted first (oldest first on ties).

        ``sort="order"`` lists by the manual ordering key instead.
        """
        if sort not in SORT_MODES:
            raise ValidationError("Invalid sort value.")

        if sort == SORT_BY_ORDER:
            ordering = (nullslast(asc(SongRequest.sort_order)), asc(SongRequest.created_at))
        else:
            ordering = (desc(SongRequest.votes), asc(SongRequest.created_at))

        try:
            with self.session_scope() as db:
                requests = (
                    db.query(SongRequest)
                    .filter(SongRequest.dancefloor_id == dancefloor_id)
                    .order_by(*ordering)
                    .all()
                )
                return [song_request.to_dict() for song_request in requests]
        except SQLAlchemyError:
            logger.exception(f"[LIST] Failed to fetch song requests for dancefloor {dancefloor_id}")
            raise StoreFailure("Failed to fetch song requests.")
