"""
Models package for the application.
"""

from .day_entry import DayEntryRecord

__all__ = [
    "DayEntryRecord",
]
