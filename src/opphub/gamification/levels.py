"""Level thresholds and computation.

Level and stars are never stored independently of XP: they are re-derived from
the table below after every XP change.
"""

from __future__ import annotations

from enum import Enum


class Level(str, Enum):
    NEWCOMER = "Newcomer"
    EXPLORER = "Explorer"
    CONTRIBUTOR = "Contributor"
    COLLABORATOR = "Collaborator"
    ACHIEVER = "Achiever"
    EXPERT = "Expert"
    LEGEND = "Legend"


DEFAULT_LEVEL = Level.NEWCOMER
DEFAULT_STARS = 1

# (xp threshold, level, stars), highest first
LEVEL_THRESHOLDS: list[tuple[int, Level, int]] = [
    (700, Level.LEGEND, 7),
    (400, Level.EXPERT, 6),
    (200, Level.ACHIEVER, 5),
    (100, Level.COLLABORATOR, 4),
    (50, Level.CONTRIBUTOR, 3),
    (20, Level.EXPLORER, 2),
]


def compute_level(xp: int) -> tuple[Level, int]:
    """Return (level, stars) for the highest threshold ``xp`` meets."""
    for threshold, level, stars in LEVEL_THRESHOLDS:
        if xp >= threshold:
            return level, stars
    return DEFAULT_LEVEL, DEFAULT_STARS


def next_threshold(xp: int) -> int | None:
    """XP needed for the next level, or None at Legend."""
    upcoming = [threshold for threshold, _, _ in LEVEL_THRESHOLDS if threshold > xp]
    return min(upcoming) if upcoming else None
