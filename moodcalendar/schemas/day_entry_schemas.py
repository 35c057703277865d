"""
Day Entry Schemas
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Tuple
from datetime import date

from moodcalendar.enums import MoodRating


class DayEntry(BaseModel):
    """Read-only snapshot of one day's ratings and notes."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    date: date
    morning_rating: Optional[MoodRating] = None
    afternoon_rating: Optional[MoodRating] = None
    evening_rating: Optional[MoodRating] = None
    happy_note: Optional[str] = None
    sad_note: Optional[str] = None

    @property
    def ratings(self) -> Tuple[Optional[MoodRating], Optional[MoodRating], Optional[MoodRating]]:
        return self.morning_rating, self.afternoon_rating, self.evening_rating

    def is_blank(self) -> bool:
        """True when nothing was rated or written; same as having no record."""
        return all(r is None for r in self.ratings) and not self.happy_note and not self.sad_note

    @classmethod
    def blank(cls, day: date) -> "DayEntry":
        return cls(date=day)


class DayEntryUpsertRequest(BaseModel):
    """Full replacement of a day. Omitted fields are stored as empty."""

    morning_rating: Optional[MoodRating] = None
    afternoon_rating: Optional[MoodRating] = None
    evening_rating: Optional[MoodRating] = None
    happy_note: Optional[str] = Field(None, max_length=2000)
    sad_note: Optional[str] = Field(None, max_length=2000)


class ColorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    hex: str


class DayEntryResponse(BaseModel):
    entry: DayEntry
    exists: bool
    color: ColorSchema


class SearchResponse(BaseModel):
    query: str
    results: List[DayEntry]
