"""Daily check-in state machine.

Pure functions over a snapshot of a user's gamification fields. Persisting the
result is the caller's job (see ``opphub.users.service.check_in_user``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone

from opphub.gamification.levels import DEFAULT_LEVEL, DEFAULT_STARS, Level, compute_level

DEFAULT_CHECK_IN_XP = 2

FIRST_CHECK_IN = "First check-in completed!"
STREAK_CONTINUED = "Streak continued!"
NEW_STREAK = "New streak started!"
ALREADY_CHECKED_IN = "Already checked in today."


@dataclass(frozen=True)
class GamificationState:
    xp: int = 0
    level: Level = DEFAULT_LEVEL
    stars: int = DEFAULT_STARS
    streak_current: int = 0
    streak_longest: int = 0
    last_check_in: datetime | None = None


@dataclass(frozen=True)
class CheckInResult:
    success: bool
    message: str
    state: GamificationState


def update_level(state: GamificationState) -> GamificationState:
    """Re-derive level and stars from XP."""
    level, stars = compute_level(state.xp)
    return replace(state, level=level, stars=stars)


def _utc_date(dt: datetime) -> date:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).date()


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole UTC calendar days from ``earlier`` to ``later``."""
    return (_utc_date(later) - _utc_date(earlier)).days


def handle_daily_check_in(
    state: GamificationState,
    now: datetime,
    xp_award: int = DEFAULT_CHECK_IN_XP,
) -> CheckInResult:
    """
    Apply one check-in at ``now``.

    - first ever: streak 1/1, "First check-in completed!"
    - same UTC day: unchanged state, success=False
    - next day: streak +1, longest raised if exceeded
    - two or more days later: streak back to 1, longest kept

    Every successful transition awards ``xp_award`` and re-derives the level.
    """
    if state.last_check_in is None:
        new_state = replace(
            state,
            streak_current=1,
            streak_longest=max(state.streak_longest, 1),
            xp=state.xp + xp_award,
            last_check_in=now,
        )
        return CheckInResult(True, FIRST_CHECK_IN, update_level(new_state))

    days_difference = days_between(state.last_check_in, now)

    # A last check-in "in the future" (clock skew) counts as today
    if days_difference <= 0:
        return CheckInResult(False, ALREADY_CHECKED_IN, state)

    if days_difference == 1:
        current = state.streak_current + 1
        new_state = replace(
            state,
            streak_current=current,
            streak_longest=max(state.streak_longest, current),
            xp=state.xp + xp_award,
            last_check_in=now,
        )
        return CheckInResult(True, STREAK_CONTINUED, update_level(new_state))

    new_state = replace(
        state,
        streak_current=1,
        streak_longest=max(state.streak_longest, 1),
        xp=state.xp + xp_award,
        last_check_in=now,
    )
    return CheckInResult(True, NEW_STREAK, update_level(new_state))
