"""
Chat models for Dancefloor.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from .database_config import Base
from dancefloor.utils.helpers import utc_now, isoformat_utc


MAX_MESSAGE_LENGTH = 300


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    dancefloor_id = Column(String(36), ForeignKey("dancefloors.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(MAX_MESSAGE_LENGTH), nullable=False)
    author_id = Column(String(36), ForeignKey("djs.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "dancefloorId": self.dancefloor_id,
            "message": self.message,
            "authorId": self.author_id,
            "createdAt": isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f"<Message on {self.dancefloor_id}>"
