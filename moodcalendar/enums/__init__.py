"""
Shared enums for the application.
"""

from .mood_enums import (
    MoodRating,
    BlendStrategy
)

__all__ = [
    "MoodRating",
    "BlendStrategy"
]
