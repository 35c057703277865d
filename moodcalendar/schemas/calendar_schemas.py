"""
Calendar API Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date

from moodcalendar.schemas.day_entry_schemas import ColorSchema, DayEntry


class MonthCursorRequest(BaseModel):
    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)


class YearCursorRequest(BaseModel):
    year: int = Field(..., ge=1, le=9999)


class MonthEntriesResponse(BaseModel):
    """Entries of the month under the cursor"""
    month: str  # YYYY-MM
    start_date: date
    end_date: date
    entries: List[DayEntry]


class YearEntriesResponse(BaseModel):
    """Entries of the year under the cursor"""
    year: int
    start_date: date
    end_date: date
    entries: List[DayEntry]


class DayCell(BaseModel):
    date: date
    day: int
    color: ColorSchema
    is_today: bool
    entry: Optional[DayEntry] = None


class MonthGrid(BaseModel):
    """Monday-first grid of one month"""
    month: str  # YYYY-MM
    leading_blanks: int  # empty cells before day 1
    days: List[DayCell]


class YearOverview(BaseModel):
    year: int
    months: List[MonthGrid]
