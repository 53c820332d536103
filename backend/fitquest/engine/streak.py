"""
Streak tracking: pure functions, no state access.

Two separate transitions live here:
  * check_decay: run on access, penalises XP once a break is detected.
  * update_streak: run when a new workout is saved.
The weekly grace flag is only read and consumed here; resetting it is up to
the caller (see should_reset_grace).
"""
from dataclasses import dataclass
from datetime import date, datetime

from .xp import round_half_up

DECAY_PER_MISSED_DAY = 0.05
MAX_DECAY_PERCENT = 0.25
GRACE_GAP_DAYS = 2


@dataclass(frozen=True)
class DecayCheck:
    decay: int
    streak_broken: bool
    use_grace: bool = False
    missed_days: int = 0


@dataclass(frozen=True)
class StreakUpdate:
    streak: int
    longest: int
    grace_used_this_week: bool
    same_day: bool = False
    used_grace: bool = False


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_between(earlier: date | datetime, later: date | datetime) -> int:
    """Whole calendar days from `earlier` to `later` (never negative)."""
    return max((_as_date(later) - _as_date(earlier)).days, 0)


def grace_available(grace_used_this_week: bool) -> bool:
    return not grace_used_this_week


def consume_grace(grace_used_this_week: bool) -> tuple[bool, bool]:
    """Returns (consumed, new_flag). Nothing is consumed once the week's grace is spent."""
    if grace_used_this_week:
        return False, True
    return True, True


def should_reset_grace(last_active: date | datetime | None, now: date | datetime) -> bool:
    """True once `now` falls in a later ISO week than the last activity."""
    if last_active is None:
        return False
    last_year, last_week, _ = _as_date(last_active).isocalendar()
    now_year, now_week, _ = _as_date(now).isocalendar()
    return (now_year, now_week) > (last_year, last_week)


def check_decay(xp: int, days_since_active: int | None, grace_used_this_week: bool) -> DecayCheck:
    """
    Decay for a streak break, computed once when the break is first seen.

    <= 1 day idle: nothing. Exactly 2 with grace left: spend grace, no decay.
    Otherwise 5% of XP per missed day (days idle - 1), capped at 25%.
    """
    if days_since_active is None or days_since_active <= 1:
        return DecayCheck(decay=0, streak_broken=False)

    if days_since_active == GRACE_GAP_DAYS and grace_available(grace_used_this_week):
        return DecayCheck(decay=0, streak_broken=False, use_grace=True)

    missed_days = days_since_active - 1
    decay_percent = min(MAX_DECAY_PERCENT, missed_days * DECAY_PER_MISSED_DAY)
    decay = round_half_up(max(xp, 0) * decay_percent)
    return DecayCheck(decay=decay, streak_broken=True, missed_days=missed_days)


def update_streak(
    last_active: date | datetime | None,
    current_streak: int,
    longest_streak: int,
    grace_used_this_week: bool,
    today: date | datetime,
) -> StreakUpdate:
    """
    Streak after a workout logged on `today`.
    Same day: unchanged. Next day: +1. Two days with grace left: +1 and grace
    spent. Anything else (or no prior record): back to 1.
    """
    current_streak = max(current_streak, 0)
    longest_streak = max(longest_streak, current_streak)

    if last_active is None:
        return StreakUpdate(streak=1, longest=max(longest_streak, 1),
                            grace_used_this_week=grace_used_this_week)

    gap = days_between(last_active, today)

    if gap == 0:
        return StreakUpdate(streak=current_streak, longest=longest_streak,
                            grace_used_this_week=grace_used_this_week, same_day=True)

    used_grace = False
    if gap == 1:
        new_streak = current_streak + 1
    elif gap == GRACE_GAP_DAYS and grace_available(grace_used_this_week):
        new_streak = current_streak + 1
        used_grace, grace_used_this_week = consume_grace(grace_used_this_week)
    else:
        new_streak = 1

    return StreakUpdate(
        streak=new_streak,
        longest=max(longest_streak, new_streak),
        grace_used_this_week=grace_used_this_week,
        used_grace=used_grace,
    )
