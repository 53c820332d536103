"""
XP computation rules: pure functions, no state access.
"""
import math
from dataclasses import dataclass

MIN_WORKOUT_XP = 5
MAX_STREAK_MULTIPLIER = 2.0
STREAK_STEP = 0.1
FIRST_ACTIVITY_BONUS = 20


@dataclass(frozen=True)
class WorkoutXP:
    base_xp: int
    streak_multiplier: float
    first_bonus: int
    total_xp: int


def round_half_up(value: float) -> int:
    """round() that sends .5 upward instead of to the nearest even integer."""
    return int(math.floor(value + 0.5))


def compute_workout_xp(calories_burned: float, streak: int, is_first_activity_today: bool) -> WorkoutXP:
    """
    base = max(5, round(calories / 2))
    multiplier = min(2.0, 1.0 + streak * 0.1)
    total = round(base * multiplier) + (20 if first workout today else 0)
    """
    calories_burned = max(calories_burned or 0, 0)
    streak = max(streak or 0, 0)

    base_xp = max(MIN_WORKOUT_XP, round_half_up(calories_burned / 2))
    streak_multiplier = min(MAX_STREAK_MULTIPLIER, 1.0 + streak * STREAK_STEP)
    first_bonus = FIRST_ACTIVITY_BONUS if is_first_activity_today else 0
    total_xp = round_half_up(base_xp * streak_multiplier) + first_bonus

    return WorkoutXP(base_xp, streak_multiplier, first_bonus, total_xp)


def compute_quest_xp(quest) -> int:
    """Quest XP is the reward snapshotted on the instance (or template)."""
    return quest.xp_reward
