"""
Concert Model

Concerts, shows and events managed by the concerts plugin.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text

from cms.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Concert(Base):
    __tablename__ = "concerts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    venue = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    date = Column(Date, nullable=False, index=True)
    # Free-form door/show time, e.g. "20:00"
    time = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    ticket_url = Column(String(2048), nullable=True)
    image_url = Column(String(2048), nullable=True)
    published = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "venue": self.venue,
            "city": self.city,
            "date": self.date.isoformat() if self.date else None,
            "time": self.time,
            "description": self.description,
            "ticket_url": self.ticket_url,
            "image_url": self.image_url,
            "published": self.published,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
