"""
Dancefloor session models for Dancefloor.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, text
from .database_config import Base
from dancefloor.utils.helpers import utc_now, isoformat_utc


DANCEFLOOR_ACTIVE = "active"
DANCEFLOOR_COMPLETED = "completed"
DANCEFLOOR_STATUSES = (DANCEFLOOR_ACTIVE, DANCEFLOOR_COMPLETED)


class Dancefloor(Base):
    __tablename__ = "dancefloors"
    __table_args__ = (
        CheckConstraint("status IN ('active', 'completed')", name="ck_dancefloors_status"),
        # A DJ runs at most one live dancefloor
        Index(
            "uq_dancefloors_one_active_per_dj",
            "dj_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    dj_id = Column(String(36), ForeignKey("djs.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=DANCEFLOOR_ACTIVE)
    created_at = Column(DateTime, default=utc_now)
    ended_at = Column(DateTime, nullable=True)

    # Running counters broadcast to clients instead of re-counting rows
    requests_count = Column(Integer, nullable=False, default=0)
    messages_count = Column(Integer, nullable=False, default=0)

    @classmethod
    def increment_counter(cls, db, dancefloor_id, counter):
        """Atomically bump requests_count/messages_count and return the new value.

        Returns None when the dancefloor does not exist.
        """
        column = getattr(cls, counter)
        updated = (
            db.query(cls)
            .filter(cls.id == dancefloor_id)
            .update({column: column + 1}, synchronize_session=False)
        )
        if not updated:
            return None
        return db.query(column).filter(cls.id == dancefloor_id).scalar()

    def to_dict(self):
        return {
            "id": self.id,
            "djId": self.dj_id,
            "status": self.status,
            "createdAt": isoformat_utc(self.created_at),
            "endedAt": isoformat_utc(self.ended_at),
            "requestsCount": self.requests_count,
            "messagesCount": self.messages_count,
        }

    def __repr__(self):
        return f"<Dancefloor {self.id} ({self.status})>"
