import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ConcertBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    venue: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    date: dt.date
    time: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None
    ticket_url: Optional[str] = Field(None, max_length=2048)
    image_url: Optional[str] = Field(None, max_length=2048)
    published: bool = False


class ConcertCreate(ConcertBase):
    pass


class ConcertUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    venue: Optional[str] = Field(None, min_length=1, max_length=200)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None
    ticket_url: Optional[str] = Field(None, max_length=2048)
    image_url: Optional[str] = Field(None, max_length=2048)
    published: Optional[bool] = None

    @field_validator("title", "venue", "city", "date", "published")
    @classmethod
    def reject_null(cls, v):
        """Fields may be omitted from an update but not cleared"""
        if v is None:
            raise ValueError("Field cannot be null")
        return v
