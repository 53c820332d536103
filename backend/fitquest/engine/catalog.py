"""
Quest template definitions and the trigger map that routes activity to them.
"""
import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

DIFFICULTY_WEIGHTS: dict[str, int] = {"easy": 3, "medium": 5, "hard": 2}

# Activity categories an event can carry.
TRIGGER_CATEGORIES = frozenset({"workout", "workout_count", "nutrition", "streak"})


class CatalogError(ValueError):
    """Raised when seed data cannot form a consistent catalog."""


@dataclass(frozen=True)
class QuestTemplate:
    quest_id: str
    scope: str          # 'daily' | 'weekly'
    category: str       # 'workout' | 'nutrition' | 'streak' | 'social'
    title: str
    description: str
    target: int
    xp_reward: int
    difficulty: str     # key of DIFFICULTY_WEIGHTS
    icon: str
    min_rank: str = "E"
    active: bool = True

    @property
    def weight(self) -> int:
        return DIFFICULTY_WEIGHTS.get(self.difficulty, DIFFICULTY_WEIGHTS["hard"])


SEED_TEMPLATES: list[QuestTemplate] = [
    # Daily, easy
    QuestTemplate("burn_100",     "daily", "workout",   "Light Burn",      "Burn 100+ calories through workouts",  100, 25, "easy", "🔥",  "E"),
    QuestTemplate("burn_200",     "daily", "workout",   "Burn 200 Cal",    "Burn 200+ calories through workouts",  200, 50, "easy", "🔥",  "E"),
    QuestTemplate("any_workout",  "daily", "workout",   "Do Any Workout",  "Complete at least one workout",          1, 30, "easy", "💪",  "E"),
    QuestTemplate("two_workouts", "daily", "workout",   "Double Session",  "Complete 2 separate workouts today",     2, 50, "easy", "💪",  "D"),
    QuestTemplate("log_meal",     "daily", "nutrition", "Log a Meal",      "Log at least one meal today",            1, 20, "easy", "🍽️", "E"),
    QuestTemplate("log_2_meals",  "daily", "nutrition", "Log 2 Meals",     "Log at least 2 meals today",             2, 35, "easy", "🍽️", "E"),
    QuestTemplate("log_3_meals",  "daily", "nutrition", "Log 3 Meals",     "Log at least 3 meals today",             3, 50, "easy", "🍽️", "E"),

    # Daily, medium
    QuestTemplate("burn_250",       "daily", "workout",   "Quarter K Burn",    "Burn 250+ calories through workouts",       250, 60, "medium", "🔥",  "D"),
    QuestTemplate("burn_300",       "daily", "workout",   "Burn 300 Cal",      "Burn 300+ calories through workouts",       300, 75, "medium", "🔥",  "D"),
    QuestTemplate("burn_400",       "daily", "workout",   "Burn 400 Cal",      "Burn 400+ calories through intense effort", 400, 90, "medium", "🔥",  "C"),
    QuestTemplate("three_workouts", "daily", "workout",   "Triple Threat",     "Complete 3 separate workouts today",          3, 70, "medium", "💪",  "C"),
    QuestTemplate("four_workouts",  "daily", "workout",   "Quad Session",      "Complete 4 separate workouts today",          4, 85, "medium", "💪",  "B"),
    QuestTemplate("log_4_meals",    "daily", "nutrition", "Full Day Tracking", "Log 4 meals throughout the day",              4, 65, "medium", "🍽️", "D"),
    QuestTemplate("log_5_meals",    "daily", "nutrition", "Nutrition Master",  "Log 5 meals with full tracking",              5, 80, "medium", "🍽️", "C"),
    QuestTemplate("log_6_meals",    "daily", "nutrition", "Full Fuel Day",     "Log 6 meals, one every 3 hours",              6, 90, "medium", "🍽️", "B"),

    # Daily, hard
    QuestTemplate("burn_500",      "daily", "workout",   "Burn 500 Cal",  "Burn 500+ calories through intense workouts", 500, 120, "hard", "💥",  "C"),
    QuestTemplate("burn_600",      "daily", "workout",   "Burn 600 Cal",  "Burn 600+ calories, serious grind",           600, 140, "hard", "💥",  "B"),
    QuestTemplate("burn_750",      "daily", "workout",   "Inferno",       "Burn 750+ calories in a single day",          750, 150, "hard", "💥",  "A"),
    QuestTemplate("five_workouts", "daily", "workout",   "Iron Day",      "Complete 5 separate workouts in one day",       5, 130, "hard", "💥",  "A"),
    QuestTemplate("six_workouts",  "daily", "workout",   "Beast Mode",    "Complete 6 separate workouts in one day",       6, 150, "hard", "💥",  "A"),
    QuestTemplate("log_7_meals",   "daily", "nutrition", "Meal Prep Pro", "Log 7 meals, full bodybuilder schedule",        7, 120, "hard", "🍽️", "B"),

    # Weekly, easy
    QuestTemplate("weekly_2_workouts", "weekly", "workout",   "2 Workouts This Week",   "Complete at least 2 workouts this week",   2,    60,  "easy", "📅", "E"),
    QuestTemplate("weekly_3_workouts", "weekly", "workout",   "3 Workouts This Week",   "Complete 3 workouts in a single week",     3,    100, "easy", "📅", "E"),
    QuestTemplate("weekly_4_workouts", "weekly", "workout",   "4 Workouts This Week",   "Complete 4 workouts in a single week",     4,    120, "easy", "📅", "D"),
    QuestTemplate("weekly_burn_1000",  "weekly", "workout",   "Burn 1K This Week",      "Burn 1000+ total calories this week",      1000, 100, "easy", "📅", "E"),
    QuestTemplate("weekly_5_meals",    "weekly", "nutrition", "Log 5 Meals This Week",  "Log at least 5 meals throughout the week", 5,    70,  "easy", "📅", "E"),
    QuestTemplate("weekly_7_meals",    "weekly", "nutrition", "Log 7 Meals This Week",  "Log a meal every day this week",           7,    90,  "easy", "📅", "E"),
    QuestTemplate("weekly_10_meals",   "weekly", "nutrition", "Log 10 Meals This Week", "Log 10 meals across the week",             10,   110, "easy", "📅", "D"),
    QuestTemplate("weekly_streak_3",   "weekly", "streak",    "3-Day Streak",           "Maintain a 3-day workout streak",          3,    100, "easy", "🔥", "E"),

    # Weekly, medium
    QuestTemplate("weekly_5_workouts", "weekly", "workout",   "5 Workouts This Week",   "Complete 5 workouts in a single week", 5,    160, "medium", "📅", "E"),
    QuestTemplate("weekly_6_workouts", "weekly", "workout",   "6 Workouts This Week",   "Complete 6 workouts in a single week", 6,    200, "medium", "📅", "C"),
    QuestTemplate("weekly_burn_1500",  "weekly", "workout",   "Burn 1.5K This Week",    "Burn 1500+ total calories this week",  1500, 150, "medium", "🏆", "D"),
    QuestTemplate("weekly_burn_2000",  "weekly", "workout",   "Burn 2K This Week",      "Burn 2000+ total calories this week",  2000, 200, "medium", "🏆", "D"),
    QuestTemplate("weekly_burn_2500",  "weekly", "workout",   "Burn 2.5K This Week",    "Burn 2500+ total calories this week",  2500, 220, "medium", "🏆", "C"),
    QuestTemplate("weekly_14_meals",   "weekly", "nutrition", "Log 14 Meals This Week", "Log 2 meals per day, every day",       14,   180, "medium", "📅", "C"),
    QuestTemplate("weekly_streak_5",   "weekly", "streak",    "5-Day Streak",           "Maintain a 5-day workout streak",      5,    200, "medium", "🔥", "D"),
    QuestTemplate("weekly_streak_6",   "weekly", "streak",    "6-Day Streak",           "Maintain a 6-day workout streak",      6,    250, "medium", "🔥", "C"),

    # Weekly, hard
    QuestTemplate("weekly_7_workouts",     "weekly", "workout",   "7 Workouts This Week", "Work out every single day this week",          7,    250, "hard", "🏆", "B"),
    QuestTemplate("weekly_burn_3000",      "weekly", "workout",   "Burn 3K This Week",    "Burn 3000+ total calories this week",          3000, 280, "hard", "🏆", "B"),
    QuestTemplate("weekly_burn_4000",      "weekly", "workout",   "Burn 4K This Week",    "Burn 4000+ total calories, elite week",        4000, 350, "hard", "🏆", "A"),
    QuestTemplate("weekly_21_meals",       "weekly", "nutrition", "Full Nutrition Week",  "Log 3 meals per day, every day",               21,   250, "hard", "🏆", "B"),
    QuestTemplate("weekly_streak_7",       "weekly", "streak",    "7-Day Streak",         "Maintain a 7-day workout streak",              7,    350, "hard", "🔥", "E"),
    QuestTemplate("weekly_streak_perfect", "weekly", "streak",    "Perfect Week",         "7-day streak + 21 meals, ultimate discipline", 7,    400, "hard", "👑", "A"),
]

# Which activity category moves each quest forward.
QUEST_TRIGGERS: dict[str, str] = {
    "burn_100": "workout", "burn_200": "workout", "burn_250": "workout",
    "burn_300": "workout", "burn_400": "workout", "burn_500": "workout",
    "burn_600": "workout", "burn_750": "workout",
    "any_workout": "workout_count", "two_workouts": "workout_count",
    "three_workouts": "workout_count", "four_workouts": "workout_count",
    "five_workouts": "workout_count", "six_workouts": "workout_count",
    "log_meal": "nutrition", "log_2_meals": "nutrition", "log_3_meals": "nutrition",
    "log_4_meals": "nutrition", "log_5_meals": "nutrition", "log_6_meals": "nutrition",
    "log_7_meals": "nutrition",

    "weekly_2_workouts": "workout_count", "weekly_3_workouts": "workout_count",
    "weekly_4_workouts": "workout_count", "weekly_5_workouts": "workout_count",
    "weekly_6_workouts": "workout_count", "weekly_7_workouts": "workout_count",
    "weekly_burn_1000": "workout", "weekly_burn_1500": "workout",
    "weekly_burn_2000": "workout", "weekly_burn_2500": "workout",
    "weekly_burn_3000": "workout", "weekly_burn_4000": "workout",
    "weekly_5_meals": "nutrition", "weekly_7_meals": "nutrition",
    "weekly_10_meals": "nutrition", "weekly_14_meals": "nutrition",
    "weekly_21_meals": "nutrition",
    "weekly_streak_3": "streak", "weekly_streak_5": "streak", "weekly_streak_6": "streak",
    "weekly_streak_7": "streak", "weekly_streak_perfect": "streak",
}


class QuestCatalog:
    """
    Read-only pool of quest templates, validated once at construction.

    Every template must have a trigger category; an unmapped quest would
    never progress, so it is rejected here with CatalogError.
    """

    def __init__(self, templates: Iterable[QuestTemplate], triggers: dict[str, str]):
        by_id: dict[str, QuestTemplate] = {}
        for tpl in templates:
            if tpl.quest_id in by_id:
                raise CatalogError(f"duplicate quest id: {tpl.quest_id}")
            if tpl.scope not in ("daily", "weekly"):
                raise CatalogError(f"{tpl.quest_id}: unknown scope {tpl.scope!r}")
            if tpl.target <= 0 or tpl.xp_reward <= 0:
                raise CatalogError(f"{tpl.quest_id}: target and xp_reward must be positive")
            trigger = triggers.get(tpl.quest_id)
            if trigger is None:
                raise CatalogError(f"{tpl.quest_id}: no trigger category mapped")
            if trigger not in TRIGGER_CATEGORIES:
                raise CatalogError(f"{tpl.quest_id}: unknown trigger category {trigger!r}")
            by_id[tpl.quest_id] = tpl

        unused = set(triggers) - set(by_id)
        if unused:
            logger.warning("Trigger map has entries for unknown quests: %s", sorted(unused))

        self._templates = tuple(by_id.values())
        self._by_id = by_id
        self._triggers = {qid: triggers[qid] for qid in by_id}

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, quest_id: str) -> QuestTemplate | None:
        return self._by_id.get(quest_id)

    def trigger_for(self, quest_id: str) -> str | None:
        return self._triggers.get(quest_id)

    def templates_for(self, scope: str, eligible_ranks: Iterable[str]) -> list[QuestTemplate]:
        ranks = set(eligible_ranks)
        return [
            t for t in self._templates
            if t.scope == scope and t.active and t.min_rank in ranks
        ]


def default_catalog() -> QuestCatalog:
    return QuestCatalog(SEED_TEMPLATES, QUEST_TRIGGERS)
