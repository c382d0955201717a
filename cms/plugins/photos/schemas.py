"""Request schemas for the photos API."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AlbumCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    published: bool = False


class AlbumUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    cover_photo_id: Optional[int] = None
    published: Optional[bool] = None

    @field_validator("title", "slug", "published")
    @classmethod
    def reject_null(cls, v):
        """Fields may be omitted from an update but not cleared"""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PhotoCreate(BaseModel):
    """Metadata for a photo whose bytes were uploaded elsewhere."""

    url: str = Field(..., min_length=1)
    storage_key: Optional[str] = None
    filename: str = Field(..., min_length=1)
    size: int = 0
    mime_type: str = "image/jpeg"
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    caption: Optional[str] = None
    alt_text: Optional[str] = None


class PhotoUpdate(BaseModel):
    title: Optional[str] = None
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    order: Optional[int] = None

    @field_validator("order")
    @classmethod
    def reject_null_order(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PhotoReorder(BaseModel):
    photo_ids: list[int]
