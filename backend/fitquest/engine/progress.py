"""
Quest progress: routes activity into the user's open quests.
"""
import logging
from datetime import datetime, timezone

from ..models import QuestCompletion, QuestInstance, UserProgressionState
from .catalog import QuestCatalog
from .ranks import RankTable
from .xp import compute_quest_xp

logger = logging.getLogger(__name__)


def _complete(state: UserProgressionState, quest: QuestInstance, now: datetime) -> QuestCompletion:
    quest.completed = True
    quest.completed_at = now
    reward = compute_quest_xp(quest)
    state.xp += reward
    logger.info("Quest %s completed: +%d XP", quest.quest_id, reward)
    return QuestCompletion(quest_id=quest.quest_id, title=quest.title, xp_reward=reward)


def advance(
    state: UserProgressionState,
    category: str,
    magnitude: int,
    catalog: QuestCatalog,
    now: datetime,
) -> list[QuestCompletion]:
    """
    Add `magnitude` to every open quest triggered by `category`, never past
    its target. Quests that reach their target are completed, their reward is
    added to state.xp, and they are returned. Completed or expired quests are
    left alone, so repeating a call cannot complete a quest twice.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    magnitude = max(magnitude or 0, 0)
    completions: list[QuestCompletion] = []

    for quest in state.active_quests:
        if not quest.is_open(now):
            continue
        if catalog.trigger_for(quest.quest_id) != category:
            continue

        quest.progress += min(magnitude, quest.target - quest.progress)

        if quest.progress >= quest.target:
            completions.append(_complete(state, quest, now))

    return completions


def track(
    state: UserProgressionState,
    category: str,
    level: int,
    catalog: QuestCatalog,
    now: datetime,
) -> list[QuestCompletion]:
    """
    Set every open quest triggered by `category` to `level`, capped at its
    target. For quests that mirror a running count (the current streak), so
    progress falls back when the count does. Completion works as in advance().
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    level = max(level or 0, 0)
    completions: list[QuestCompletion] = []

    for quest in state.active_quests:
        if not quest.is_open(now):
            continue
        if catalog.trigger_for(quest.quest_id) != category:
            continue

        quest.progress = min(level, quest.target)

        if quest.progress >= quest.target:
            completions.append(_complete(state, quest, now))

    return completions


def check_rank_up(old_xp: int, new_xp: int, ranks: RankTable) -> str | None:
    old_rank = ranks.get_rank(old_xp).rank
    new_rank = ranks.get_rank(new_xp).rank
    return new_rank if new_rank != old_rank else None
