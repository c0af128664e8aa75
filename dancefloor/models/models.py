"""
Consolidated models import for Dancefloor.
"""

from .database_config import Base, SessionLocal, configure_engine, init_db, drop_db, get_db

from .dj_models import DJ
from .dancefloor_models import Dancefloor, DANCEFLOOR_ACTIVE, DANCEFLOOR_COMPLETED, DANCEFLOOR_STATUSES
from .song_request_models import (
    SongRequest,
    Vote,
    REQUEST_STATUSES,
    STATUS_QUEUED,
    STATUS_PLAYING,
    STATUS_COMPLETED,
    STATUS_DECLINED,
)
from .chat_models import Message, MAX_MESSAGE_LENGTH

__all__ = [
    'Base', 'SessionLocal', 'configure_engine', 'init_db', 'drop_db', 'get_db',
    'DJ', 'Dancefloor', 'SongRequest', 'Vote', 'Message',
    'DANCEFLOOR_ACTIVE', 'DANCEFLOOR_COMPLETED', 'DANCEFLOOR_STATUSES',
    'REQUEST_STATUSES', 'STATUS_QUEUED', 'STATUS_PLAYING', 'STATUS_COMPLETED', 'STATUS_DECLINED',
    'MAX_MESSAGE_LENGTH',
]
