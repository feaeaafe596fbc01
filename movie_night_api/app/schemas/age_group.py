"""
Viewer age bands.

``AgeGroup`` values serialise to their stable identifier strings
(``"preschoolers"``, ``"littleKids"``, ...).  Comparison follows the
listed sequence, not the alphabetical order of the identifiers.
"""

from enum import Enum


class AgeGroup(str, Enum):
    PRESCHOOLERS = "preschoolers"
    LITTLE_KIDS = "littleKids"
    BIG_KIDS = "bigKids"
    TWEENS = "tweens"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    @property
    def age_range(self) -> str:
        return _AGE_RANGES[self]

    @property
    def emoji(self) -> str:
        return _EMOJI[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def description(self) -> str:
        return f"{self.emoji} {self.label} ({self.age_range})"

    # ``str`` already defines the rich comparisons, so all four are
    # overridden to compare by rank.
    def __lt__(self, other):
        if not isinstance(other, AgeGroup):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AgeGroup):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AgeGroup):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AgeGroup):
            return NotImplemented
        return self.rank >= other.rank

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.value


_ORDER = [AgeGroup.PRESCHOOLERS, AgeGroup.LITTLE_KIDS, AgeGroup.BIG_KIDS, AgeGroup.TWEENS]

_AGE_RANGES = {
    AgeGroup.PRESCHOOLERS: "2-4",
    AgeGroup.LITTLE_KIDS: "5-7",
    AgeGroup.BIG_KIDS: "8-9",
    AgeGroup.TWEENS: "10-12",
}

_EMOJI = {
    AgeGroup.PRESCHOOLERS: "🧸",
    AgeGroup.LITTLE_KIDS: "🎨",
    AgeGroup.BIG_KIDS: "🚀",
    AgeGroup.TWEENS: "🎭",
}

_LABELS = {
    AgeGroup.PRESCHOOLERS: "Preschoolers",
    AgeGroup.LITTLE_KIDS: "Little Kids",
    AgeGroup.BIG_KIDS: "Big Kids",
    AgeGroup.TWEENS: "Tweens",
}
