"""
Mood-related enums for the application.
"""

from enum import Enum


class MoodRating(str, Enum):
    """Rating for one part of the day. Values are the persisted literals."""

    GOOD = "GOOD"
    AVERAGE = "AVERAGE"
    BAD = "BAD"

    @property
    def score(self) -> int:
        return _SCORES[self]


_SCORES = {
    MoodRating.GOOD: 1,
    MoodRating.AVERAGE: 0,
    MoodRating.BAD: -1,
}


class BlendStrategy(str, Enum):
    LOOKUP = "lookup"
    STATISTICAL = "statistical"


