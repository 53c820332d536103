"""
Progression engine: one entry point per thing a user can do.

Holds the read-only catalog and rank table plus the random source, and runs
the streak, XP and quest rules in the order the activity source expects. All
methods mutate the passed state in place and perform no I/O; the caller loads
the state before and saves it after, one call at a time per user.
"""
import logging
from datetime import date, datetime, timezone

from ..config import SETTINGS, Settings
from ..models import ActivityEvent, ActivityResult, QuestCompletion, QuestInstance, UserProgressionState
from .catalog import QuestCatalog, default_catalog
from .progress import advance, check_rank_up, track
from .ranks import RankInfo, RankTable
from .selector import RandomSource, seeded
from .session import quest_date, regenerate, visible_quests
from .streak import DecayCheck, check_decay, days_between, should_reset_grace, update_streak
from .xp import WorkoutXP, compute_workout_xp, round_half_up

logger = logging.getLogger(__name__)


class ProgressionEngine:
    def __init__(
        self,
        catalog: QuestCatalog | None = None,
        ranks: RankTable | None = None,
        rng: RandomSource | None = None,
        settings: Settings = SETTINGS,
    ):
        self.catalog = catalog or default_catalog()
        self.ranks = ranks or RankTable()
        self.rng = rng or seeded(settings.random_seed)
        self.settings = settings

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _today(self, now: datetime) -> date:
        return quest_date(now, self.settings.boundary_utc)

    def _roll_grace_week(self, state: UserProgressionState, today: date) -> None:
        if not state.grace_used_this_week:
            return
        spent_on = state.grace_used_on
        if spent_on is None and state.last_active_at is not None:
            spent_on = self._today(state.last_active_at)
        if should_reset_grace(spent_on, today):
            state.grace_used_this_week = False
            state.grace_used_on = None

    def _spend_grace(self, state: UserProgressionState, today: date) -> None:
        state.grace_used_this_week = True
        state.grace_used_on = today

    # ── Reads ─────────────────────────────────────────────────────────────────

    def quests(self, state: UserProgressionState, now: datetime) -> list[QuestInstance]:
        """Refresh if due, then return the quests that have not expired."""
        regenerate(state, now, self.catalog, self.ranks, self.rng, self.settings)
        return visible_quests(state, now)

    def rank_info(self, state: UserProgressionState) -> RankInfo:
        return self.ranks.rank_info(state.xp)

    # ── Decay ─────────────────────────────────────────────────────────────────

    def apply_decay(self, state: UserProgressionState, now: datetime) -> DecayCheck:
        """
        Check the idle gap since the last workout and penalise a broken streak.

        A broken streak drops to 0, which keeps later checks from decaying the
        same gap again. Spending grace is recorded against today so a repeated
        check on the same day is a no-op.
        """
        if state.last_active_at is None or state.streak == 0:
            return DecayCheck(decay=0, streak_broken=False)

        today = self._today(now)
        if state.grace_used_on == today:
            return DecayCheck(decay=0, streak_broken=False)

        self._roll_grace_week(state, today)
        idle = days_between(self._today(state.last_active_at), today)
        result = check_decay(state.xp, idle, state.grace_used_this_week)

        if result.use_grace:
            self._spend_grace(state, today)
            logger.info("Grace day spent to keep a %d-day streak", state.streak)
        elif result.streak_broken:
            state.xp = max(state.xp - result.decay, 0)
            logger.info("Streak of %d broken after %d missed day(s): -%d XP",
                        state.streak, result.missed_days, result.decay)
            state.streak = 0
            track(state, "streak", 0, self.catalog, now)

        return result

    # ── Activity ──────────────────────────────────────────────────────────────

    def log_workout(self, state: UserProgressionState, calories_burned: float, now: datetime) -> ActivityResult:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        today = self._today(now)
        last_day = self._today(state.last_active_at) if state.last_active_at else None
        old_xp = state.xp

        self._roll_grace_week(state, today)
        # Grace already spent on this very gap by today's decay check still covers it.
        grace_used = state.grace_used_this_week and state.grace_used_on != today

        streak = update_streak(last_day, state.streak, state.longest_streak, grace_used, today)
        if streak.used_grace:
            self._spend_grace(state, today)
        state.streak = streak.streak
        state.longest_streak = streak.longest

        breakdown: WorkoutXP = compute_workout_xp(calories_burned, state.streak, last_day != today)
        state.xp += breakdown.total_xp

        regenerate(state, now, self.catalog, self.ranks, self.rng, self.settings)
        completions: list[QuestCompletion] = []
        completions += advance(state, "workout", round_half_up(max(calories_burned or 0, 0)), self.catalog, now)
        completions += advance(state, "workout_count", 1, self.catalog, now)
        completions += track(state, "streak", state.streak, self.catalog, now)

        state.last_active_at = now
        rank_up = check_rank_up(old_xp, state.xp, self.ranks)
        if rank_up:
            logger.info("Rank up to %s at %d XP", rank_up, state.xp)

        logger.info("Workout logged: +%d XP (x%.1f), streak %d, %d quests",
                    breakdown.total_xp, breakdown.streak_multiplier, state.streak, len(completions))

        return ActivityResult(
            xp_awarded=breakdown.total_xp,
            quest_completions=completions,
            rank_up=rank_up,
            streak=state.streak,
        )

    def log_meal(self, state: UserProgressionState, now: datetime) -> ActivityResult:
        return self.apply_event(state, ActivityEvent(category="nutrition", magnitude=1, occurred_at=now))

    def apply_event(self, state: UserProgressionState, event: ActivityEvent, now: datetime | None = None) -> ActivityResult:
        """
        Quest progress only: no streak or workout XP. Used for meals and replays.
        Raises ValueError when neither `now` nor event.occurred_at is given.
        """
        now = now or event.occurred_at
        if now is None:
            raise ValueError(f"{event.category} event has no timestamp")
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        old_xp = state.xp

        regenerate(state, now, self.catalog, self.ranks, self.rng, self.settings)
        completions = advance(state, event.category, event.magnitude, self.catalog, now)

        rank_up = check_rank_up(old_xp, state.xp, self.ranks)
        if rank_up:
            logger.info("Rank up to %s at %d XP", rank_up, state.xp)

        return ActivityResult(
            xp_awarded=0,
            quest_completions=completions,
            rank_up=rank_up,
            streak=state.streak,
        )
