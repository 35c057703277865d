"""
Mood Color Resolver
Maps the three ratings of a day to the color its calendar cell is painted with.
"""

from dataclasses import dataclass
from typing import Optional, Union

from moodcalendar.enums import BlendStrategy, MoodRating


@dataclass(frozen=True)
class Color:
    """Opaque display color: a palette bucket key plus its hex value."""

    key: str
    hex: str


# Incomplete, future or unrated days
LIGHT_GRAY = Color("light_gray", "#CCCCCC")

# Lookup palette, one bucket per multiset of three ratings
# (G = good, A = average, B = bad). Some buckets share a hex value.
C_GGG = Color("GGG", "#4CAF50")  # bright green
C_GGA = Color("GGA", "#9DCC1A")  # lime green
C_GGB = Color("GGB", "#C8CC45")  # green-yellow
C_GAA = Color("GAA", "#C8CC45")  # light yellow-green
C_GBB = Color("GBB", "#F99316")  # orange
C_GAB = Color("GAB", "#FFC328")  # amber, one of each
C_AAA = Color("AAA", "#FFC328")  # bright yellow
C_AAB = Color("AAB", "#F99316")  # orange
C_ABB = Color("ABB", "#F55D0B")  # dark orange
C_BBB = Color("BBB", "#EC3B3B")  # bright red

LOOKUP_PALETTE = {
    (3, 0, 0): C_GGG,
    (0, 3, 0): C_AAA,
    (0, 0, 3): C_BBB,
    (2, 1, 0): C_GGA,
    (2, 0, 1): C_GGB,
    (1, 2, 0): C_GAA,
    (0, 2, 1): C_AAB,
    (1, 0, 2): C_GBB,
    (0, 1, 2): C_ABB,
    (1, 1, 1): C_GAB,
}

# Statistical palette
BRIGHT_GREEN = Color("bright_green", "#4CAF50")
LIME = Color("lime", "#9DCC1A")
YELLOW_GREEN = Color("yellow_green", "#C8CC45")
YELLOW = Color("yellow", "#FFC328")
ORANGE = Color("orange", "#F99316")
RED = Color("red", "#EC3B3B")
MUDDY_GREEN = Color("muddy_green", "#7D9A6B")
MUDDY_RED = Color("muddy_red", "#A0615A")
MUDDY_GRAY = Color("muddy_gray", "#9E9E9E")

# Above this the three ratings pull in opposite directions
DISAGREEMENT_VARIANCE = 0.4

# (lower bound, color), checked top down; avg must be strictly greater
AVERAGE_THRESHOLDS = (
    (0.6, BRIGHT_GREEN),
    (0.3, LIME),
    (0.0, YELLOW_GREEN),
    (-0.3, YELLOW),
    (-0.6, ORANGE),
)


class MoodColorResolver:
    """
    Resolves (morning, afternoon, evening) ratings to a Color.

    The blend strategy is fixed at construction. Both strategies return
    LIGHT_GRAY unless all three ratings are present, and neither ever raises.
    """

    def __init__(self, strategy: Union[BlendStrategy, str] = BlendStrategy.LOOKUP):
        self.strategy = BlendStrategy(strategy)
        if self.strategy is BlendStrategy.STATISTICAL:
            self._blend = self._statistical_blend
        else:
            self._blend = self._lookup_blend

    def resolve(
        self,
        morning: Optional[MoodRating],
        afternoon: Optional[MoodRating],
        evening: Optional[MoodRating]
    ) -> Color:
        ratings = [r for r in (morning, afternoon, evening) if r is not None]
        if len(ratings) < 3:
            return LIGHT_GRAY
        return self._blend(ratings)

    def resolve_entry(self, entry) -> Color:
        """Color for a stored entry; ``None`` (no record) is the placeholder."""
        if entry is None:
            return LIGHT_GRAY
        return self.resolve(entry.morning_rating, entry.afternoon_rating, entry.evening_rating)

    @staticmethod
    def _lookup_blend(ratings) -> Color:
        counts = (
            ratings.count(MoodRating.GOOD),
            ratings.count(MoodRating.AVERAGE),
            ratings.count(MoodRating.BAD),
        )
        return LOOKUP_PALETTE.get(counts, LIGHT_GRAY)

    @staticmethod
    def _statistical_blend(ratings) -> Color:
        scores = [r.score for r in ratings]
        avg = sum(scores) / len(scores)
        var = sum((s - avg) ** 2 for s in scores) / len(scores)

        if var > DISAGREEMENT_VARIANCE:
            if avg > 0:
                return MUDDY_GREEN
            if avg < 0:
                return MUDDY_RED
            return MUDDY_GRAY

        for bound, color in AVERAGE_THRESHOLDS:
            if avg > bound:
                return color
        return RED
