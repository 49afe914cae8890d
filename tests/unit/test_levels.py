"""Tests for XP to level and stars derivation."""

import pytest

from opphub.gamification.levels import DEFAULT_LEVEL, LEVEL_THRESHOLDS, Level, compute_level, next_threshold


class TestComputeLevel:
    @pytest.mark.parametrize(
        ("xp", "level", "stars"),
        [
            (0, Level.NEWCOMER, 1),
            (19, Level.NEWCOMER, 1),
            (20, Level.EXPLORER, 2),
            (49, Level.EXPLORER, 2),
            (50, Level.CONTRIBUTOR, 3),
            (100, Level.COLLABORATOR, 4),
            (200, Level.ACHIEVER, 5),
            (399, Level.ACHIEVER, 5),
            (400, Level.EXPERT, 6),
            (700, Level.LEGEND, 7),
            (10_000, Level.LEGEND, 7),
        ],
    )
    def test_boundaries(self, xp: int, level: Level, stars: int) -> None:
        assert compute_level(xp) == (level, stars)

    def test_negative_xp_is_newcomer(self) -> None:
        assert compute_level(-5) == (DEFAULT_LEVEL, 1)

    def test_monotonic_in_xp(self) -> None:
        previous_rank, previous_stars = -1, 0
        for xp in range(0, 800):
            level, stars = compute_level(xp)
            rank = list(Level).index(level)
            assert rank >= previous_rank
            assert stars >= previous_stars
            previous_rank, previous_stars = rank, stars

    def test_pure(self) -> None:
        assert compute_level(123) == compute_level(123)

    def test_thresholds_descending(self) -> None:
        thresholds = [t for t, _, _ in LEVEL_THRESHOLDS]
        assert thresholds == sorted(thresholds, reverse=True)


class TestNextThreshold:
    def test_newcomer(self) -> None:
        assert next_threshold(0) == 20

    def test_exactly_on_threshold(self) -> None:
        assert next_threshold(50) == 100

    def test_legend_has_none(self) -> None:
        assert next_threshold(700) is None
