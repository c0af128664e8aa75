"""
Song request queue and voting models for Dancefloor.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index, CheckConstraint, text
from .database_config import Base
from dancefloor.utils.helpers import utc_now, isoformat_utc


STATUS_QUEUED = "queued"
STATUS_PLAYING = "playing"
STATUS_COMPLETED = "completed"
STATUS_DECLINED = "declined"
REQUEST_STATUSES = (STATUS_QUEUED, STATUS_PLAYING, STATUS_COMPLETED, STATUS_DECLINED)


class SongRequest(Base):
    __tablename__ = "song_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('queued', 'playing', 'completed', 'declined')",
            name="ck_song_requests_status",
        ),
        CheckConstraint("votes >= 0", name="ck_song_requests_votes"),
        # Store-level backstop for the one-playing-request-per-dancefloor rule
        Index(
            "uq_song_requests_one_playing",
            "dancefloor_id",
            unique=True,
            sqlite_where=text("status = 'playing'"),
            postgresql_where=text("status = 'playing'"),
        ),
        Index("ix_song_requests_dancefloor_votes", "dancefloor_id", "votes", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    dancefloor_id = Column(String(36), ForeignKey("dancefloors.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(String(120), nullable=True)
    song = Column(Text, nullable=False)
    votes = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=STATUS_QUEUED)
    sort_order = Column("order", Integer, nullable=True)  # manual drag-reorder key
    created_at = Column(DateTime, default=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "dancefloorId": self.dancefloor_id,
            "requesterId": self.requester_id,
            "song": self.song,
            "votes": self.votes,
            "likes": self.votes,
            "status": self.status,
            "order": self.sort_order,
            "createdAt": isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f"<SongRequest {self.song} ({self.status})>"


class Vote(Base):
    __tablename__ = "votes"

    # Composite key: one vote per voter per request
    voter_id = Column(String(120), primary_key=True)
    song_request_id = Column(
        String(36),
        ForeignKey("song_requests.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime, default=utc_now)

    def __repr__(self):
        return f"<Vote {self.voter_id} for {self.song_request_id}>"
