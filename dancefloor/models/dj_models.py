"""
DJ account model for Dancefloor.
Accounts are created by the login/signup service; this table only exists so
dancefloors and messages can reference their owner.
"""

import uuid
from sqlalchemy import Column, String, DateTime
from .database_config import Base
from dancefloor.utils.helpers import utc_now, isoformat_utc


class DJ(Base):
    __tablename__ = "djs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=False)
    created_at = Column(DateTime, default=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f"<DJ {self.name}>"
