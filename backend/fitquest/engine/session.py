"""
Lazy quest regeneration. No scheduler: expiry is checked whenever a user's
quests are accessed, and a fresh set is rolled only when the daily set has run
out.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone

from ..config import SETTINGS, Settings
from ..models import QuestInstance, UserProgressionState
from .catalog import QuestCatalog, QuestTemplate
from .ranks import RankTable
from .selector import RandomSource, weighted_sample

logger = logging.getLogger(__name__)

DEFAULT_ICONS = {"daily": "⚡", "weekly": "📅"}


def _utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def quest_date(moment: datetime, boundary: time = SETTINGS.boundary_utc) -> date:
    """Calendar date in the reset timezone (a day runs from one reset to the next)."""
    shift = (timedelta(days=1) - timedelta(hours=boundary.hour, minutes=boundary.minute)) % timedelta(days=1)
    return (_utc(moment) + shift).date()


def next_daily_boundary(now: datetime, boundary: time = SETTINGS.boundary_utc) -> datetime:
    """The next daily reset strictly after `now`."""
    now = _utc(now)
    candidate = datetime.combine(now.date(), boundary, tzinfo=timezone.utc)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def day_start(now: datetime, boundary: time = SETTINGS.boundary_utc) -> datetime:
    """When the current quest day began."""
    return next_daily_boundary(now, boundary) - timedelta(days=1)


def next_weekly_boundary(now: datetime, boundary: time = SETTINGS.boundary_utc) -> datetime:
    """The reset that ends the current quest week, i.e. the end of its Sunday quest day."""
    today = quest_date(now, boundary)
    return next_daily_boundary(now, boundary) + timedelta(days=6 - today.weekday())


def has_valid_daily(quests: list[QuestInstance], now: datetime) -> bool:
    return any(q.scope == "daily" and q.is_open(now) for q in quests)


def snapshot(template: QuestTemplate, expires_at: datetime) -> QuestInstance:
    return QuestInstance(
        quest_id=template.quest_id,
        scope=template.scope,
        title=template.title,
        description=template.description or "",
        icon=template.icon or DEFAULT_ICONS[template.scope],
        target=template.target,
        progress=0,
        xp_reward=template.xp_reward,
        completed=False,
        expires_at=expires_at,
    )


def regenerate(
    state: UserProgressionState,
    now: datetime,
    catalog: QuestCatalog,
    ranks: RankTable,
    rng: RandomSource,
    settings: Settings = SETTINGS,
) -> list[QuestInstance]:
    """
    Make sure `state.active_quests` is current and return it.

    No-op while any daily quest is still open. Otherwise keeps quests
    completed today for display, rolls a new daily set from templates at or
    below the user's rank, and rolls a weekly quest only if none is live.
    """
    now = _utc(now)
    current = list(state.active_quests)

    if has_valid_daily(current, now):
        return state.active_quests

    weekly = [q for q in current if q.scope == "weekly" and not q.is_expired(now)]
    started = day_start(now, settings.boundary_utc)
    carried = [
        q for q in current
        if q.completed and q.completed_at is not None and q.completed_at >= started
        # live weekly quests keep their own slot below
        and (q.scope == "daily" or q.is_expired(now))
    ]

    rank = ranks.get_rank(state.xp).rank
    eligible = ranks.eligible_ranks(rank)

    daily_pool = catalog.templates_for("daily", eligible)
    daily_expiry = next_daily_boundary(now, settings.boundary_utc)
    daily = [snapshot(t, daily_expiry) for t in weighted_sample(daily_pool, settings.quests_per_day, rng)]

    if not weekly:
        weekly_pool = catalog.templates_for("weekly", eligible)
        weekly_expiry = next_weekly_boundary(now, settings.boundary_utc)
        weekly = [snapshot(t, weekly_expiry) for t in weighted_sample(weekly_pool, settings.weekly_quests, rng)]
        logger.info("Rolled %d weekly quest(s) for rank %s", len(weekly), rank)

    logger.info("Rolled %d daily quest(s) for rank %s (%d carried over)", len(daily), rank, len(carried))

    state.active_quests = carried + daily + weekly
    return state.active_quests


def visible_quests(state: UserProgressionState, now: datetime) -> list[QuestInstance]:
    """Quests worth showing: everything not yet past its expiry."""
    now = _utc(now)
    return [q for q in state.active_quests if not q.is_expired(now)]
