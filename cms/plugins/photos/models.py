"""
Photo Gallery Models

Albums of ordered photos. Uploaded image bytes live in StoredFile and are
served back through the plugin's file/[key] API route.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import relationship

from cms.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Album(Base):
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_photo_id = Column(Integer, nullable=True)
    published = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    photos = relationship(
        "Photo",
        back_populates="album",
        cascade="all, delete-orphan",
        order_by="Photo.order",
        lazy="selectin",
    )

    @property
    def cover_image(self):
        if not self.photos:
            return None
        if self.cover_photo_id is not None:
            for photo in self.photos:
                if photo.id == self.cover_photo_id:
                    return photo.url
        return self.photos[0].url

    def to_dict(self, include_photos: bool = False) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "cover_photo_id": self.cover_photo_id,
            "published": self.published,
            "photo_count": len(self.photos),
            "cover_image": self.cover_image,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_photos:
            data["photos"] = [photo.to_dict() for photo in self.photos]
        return data


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    album_id = Column(Integer, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_key = Column(String(100), nullable=False)
    url = Column(String(2048), nullable=False)
    filename = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False, default=0)
    mime_type = Column(String(100), nullable=False, default="image/jpeg")
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    title = Column(String(200), nullable=True)
    caption = Column(Text, nullable=True)
    alt_text = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    album = relationship("Album", back_populates="photos")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "album_id": self.album_id,
            "storage_key": self.storage_key,
            "url": self.url,
            "filename": self.filename,
            "size": self.size,
            "mime_type": self.mime_type,
            "width": self.width,
            "height": self.height,
            "order": self.order,
            "title": self.title,
            "caption": self.caption,
            "alt_text": self.alt_text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StoredFile(Base):
    __tablename__ = "stored_files"

    key = Column(String(100), primary_key=True)
    filename = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    data = Column(LargeBinary, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
