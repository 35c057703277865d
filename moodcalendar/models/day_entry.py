from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum
from datetime import datetime
from moodcalendar.database.base import Base
from moodcalendar.enums import MoodRating


def _rating_column():
    return Column(
        SQLEnum(MoodRating, name="mood_rating", values_callable=lambda obj: [e.value for e in obj]),
        nullable=True,
    )


class DayEntryRecord(Base):
    """One calendar day of mood ratings and notes. The date is the key."""

    __tablename__ = "day_entries"

    date = Column(Date, primary_key=True, index=True)

    morning_rating = _rating_column()
    afternoon_rating = _rating_column()
    evening_rating = _rating_column()

    happy_note = Column(String(2000), nullable=True)
    sad_note = Column(String(2000), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
