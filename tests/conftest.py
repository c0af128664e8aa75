import os
import uuid
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment before importing the app
os.environ['SECRET_KEY'] = 'test-secret'
os.environ['SOCKETIO_ASYNC_MODE'] = 'threading'

from dancefloor.app_factory import create_app
from dancefloor.models import (
    get_db,
    configure_engine,
    init_db,
    drop_db,
    DJ,
    Dancefloor,
    SongRequest,
    STATUS_QUEUED,
)


class RecordingHub:
    """Stands in for BroadcastHub and remembers every publish"""

    def __init__(self):
        self.published = []

    def publish(self, dancefloor_id, event, payload):
        self.published.append((dancefloor_id, event, payload))

    def payloads(self, event):
        return [payload for _, name, payload in self.published if name == event]

    def event_names(self):
        return [name for _, name, _ in self.published]


@pytest.fixture
def database_url(tmp_path):
    """Fresh SQLite file database per test"""
    url = f"sqlite:///{tmp_path / 'dancefloor.db'}"
    configure_engine(url)
    init_db()
    yield url
    drop_db()


@pytest.fixture
def app(database_url, tmp_path):
    app, socketio = create_app({
        'TESTING': True,
        'DATABASE_URL': database_url,
        'SESSION_TYPE': 'filesystem',
        'SESSION_FILE_DIR': str(tmp_path / 'sessions'),
    })
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def make_dj(database_url):
    def _make_dj(name='DJ Test'):
        with get_db() as db:
            dj = DJ(name=name, email=f"{uuid.uuid4().hex[:8]}@example.com")
            db.add(dj)
            db.flush()
            return dj.id
    return _make_dj


@pytest.fixture
def make_dancefloor(make_dj):
    def _make_dancefloor(dj_id=None):
        with get_db() as db:
            dancefloor = Dancefloor(dj_id=dj_id or make_dj())
            db.add(dancefloor)
            db.flush()
            return dancefloor.id
    return _make_dancefloor


@pytest.fixture
def dancefloor_id(make_dancefloor):
    return make_dancefloor()


@pytest.fixture
def add_request(database_url):
    """Insert a song request directly, created one second after the previous one"""
    base_time = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)
    created = []

    def _add_request(dancefloor_id, song, votes=0, status=STATUS_QUEUED, sort_order=None):
        with get_db() as db:
            song_request = SongRequest(
                dancefloor_id=dancefloor_id,
                song=song,
                votes=votes,
                status=status,
                sort_order=sort_order,
                created_at=base_time + timedelta(seconds=len(created)),
            )
            db.add(song_request)
            db.flush()
            created.append(song_request.id)
            return song_request.id
    return _add_request


def load_request(request_id):
    with get_db() as db:
        return db.query(SongRequest).filter_by(id=request_id).one()


@pytest.fixture
def fetch_request():
    return load_request
