"""
Broadcast hub for Dancefloor.
Keeps per-dancefloor subscriber groups on top of Socket.IO rooms and fans
queue events out to them.
"""

import logging
import threading


logger = logging.getLogger(__name__)


class BroadcastHub:
    """In-process fan-out to the connections that joined a dancefloor.

    Membership lives in this process only; the database stays the authority
    for queue state, clients joining late fetch it over HTTP.
    """

    def __init__(self, socketio, namespace="/"):
        self.socketio = socketio
        self.namespace = namespace
        self._groups = {}       # {dancefloor_id: set(sid)}
        self._memberships = {}  # {sid: set(dancefloor_id)}
        self._membership_lock = threading.Lock()
        # Held while emitting so each group sees events in publish order
        self._publish_lock = threading.Lock()

    def join(self, sid, dancefloor_id):
        """Add a connection to a dancefloor group, False if no id was given"""
        if not dancefloor_id:
            logger.warning(f"[JOIN] Connection {sid} tried to join without a dancefloor id")
            return False

        self.socketio.server.enter_room(sid, dancefloor_id, namespace=self.namespace)
        with self._membership_lock:
            self._groups.setdefault(dancefloor_id, set()).add(sid)
            self._memberships.setdefault(sid, set()).add(dancefloor_id)

        logger.info(f"[JOIN] Connection {sid} joined dancefloor {dancefloor_id}")
        return True

    def leave_all(self, sid):
        """Drop a connection from every group it joined"""
        with self._membership_lock:
            dancefloor_ids = self._memberships.pop(sid, set())
            for dancefloor_id in dancefloor_ids:
                members = self._groups.get(dancefloor_id)
                if members is None:
                    continue
                members.discard(sid)
                if not members:
                    del self._groups[dancefloor_id]

        if dancefloor_ids:
            logger.info(f"[LEAVE] Connection {sid} left {len(dancefloor_ids)} dancefloor(s)")
        return dancefloor_ids

    def members(self, dancefloor_id):
        with self._membership_lock:
            return set(self._groups.get(dancefloor_id, ()))

    def groups_for(self, sid):
        with self._membership_lock:
            return set(self._memberships.get(sid, ()))

    def publish(self, dancefloor_id, event, payload):
        """Emit an event to everyone in the dancefloor group, sender included"""
        with self._publish_lock:
            self.socketio.emit(event, payload, to=dancefloor_id, namespace=self.namespace)
        logger.debug(f"[PUBLISH] {event} -> dancefloor {dancefloor_id}")

    def send(self, sid, event, payload):
        """Emit an event to a single connection"""
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)
