from datetime import date, datetime, time, timedelta, timezone

from conftest import NOW, DAILY_RESET, WEEKLY_RESET, BrokenRandom, instance
from fitquest.config import Settings
from fitquest.engine.catalog import default_catalog
from fitquest.engine.selector import seeded
from fitquest.engine.session import (
    regenerate, visible_quests, next_daily_boundary, next_weekly_boundary,
    day_start, quest_date, has_valid_daily,
)
from fitquest.models import UserProgressionState

YESTERDAY_RESET = DAILY_RESET - timedelta(days=1)


class TestBoundaries:
    def test_daily_boundary_later_today(self):
        assert next_daily_boundary(NOW) == DAILY_RESET

    def test_daily_boundary_rolls_to_tomorrow(self):
        late = datetime(2026, 3, 4, 20, 0, tzinfo=timezone.utc)
        assert next_daily_boundary(late) == DAILY_RESET + timedelta(days=1)

    def test_daily_boundary_at_reset_moves_on(self):
        assert next_daily_boundary(DAILY_RESET) == DAILY_RESET + timedelta(days=1)

    def test_naive_now_treated_as_utc(self):
        assert next_daily_boundary(NOW.replace(tzinfo=None)) == DAILY_RESET

    def test_weekly_boundary_is_coming_sunday(self):
        assert next_weekly_boundary(NOW) == WEEKLY_RESET

    def test_weekly_boundary_on_sunday_before_reset_is_today(self):
        sunday = datetime(2026, 3, 8, 9, 0, tzinfo=timezone.utc)
        assert next_weekly_boundary(sunday) == WEEKLY_RESET

    def test_weekly_boundary_follows_quest_day(self):
        # Saturday 19:00 UTC is already Sunday in the reset timezone
        saturday_evening = datetime(2026, 3, 7, 19, 0, tzinfo=timezone.utc)
        sunday_morning = datetime(2026, 3, 8, 10, 0, tzinfo=timezone.utc)
        assert next_weekly_boundary(saturday_evening) == next_weekly_boundary(sunday_morning) == WEEKLY_RESET

    def test_weekly_boundary_after_sunday_reset_is_next_week(self):
        assert next_weekly_boundary(WEEKLY_RESET) == WEEKLY_RESET + timedelta(days=7)
        late_sunday = datetime(2026, 3, 8, 20, 0, tzinfo=timezone.utc)
        assert next_weekly_boundary(late_sunday) == WEEKLY_RESET + timedelta(days=7)

    def test_weekly_boundary_custom_reset(self):
        # midnight UTC: Sunday's quest day ends at Monday 00:00
        sunday = datetime(2026, 3, 8, 9, 0, tzinfo=timezone.utc)
        assert next_weekly_boundary(sunday, time(0, 0)) == datetime(2026, 3, 9, tzinfo=timezone.utc)

    def test_custom_boundary(self):
        assert next_daily_boundary(NOW, time(0, 0)) == datetime(2026, 3, 5, tzinfo=timezone.utc)

    def test_day_start(self):
        assert day_start(NOW) == YESTERDAY_RESET

    def test_quest_date(self):
        assert quest_date(NOW) == date(2026, 3, 4)
        assert quest_date(datetime(2026, 3, 4, 19, 0, tzinfo=timezone.utc)) == date(2026, 3, 5)
        assert quest_date(NOW, time(0, 0)) == date(2026, 3, 4)


class TestRegenerate:
    def test_fresh_state_gets_daily_and_weekly(self, small_catalog, ranks):
        state = UserProgressionState()
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())

        daily = [q for q in quests if q.scope == "daily"]
        weekly = [q for q in quests if q.scope == "weekly"]
        # only two E-rank dailies exist, fewer than three requested
        assert [q.quest_id for q in daily] == ["burn_small", "count_small"]
        assert [q.quest_id for q in weekly] == ["weekly_burn"]
        assert all(q.progress == 0 and not q.completed for q in quests)
        assert all(q.expires_at == DAILY_RESET for q in daily)
        assert weekly[0].expires_at == WEEKLY_RESET
        assert state.active_quests == quests

    def test_snapshot_copies_template_fields(self, small_catalog, ranks):
        state = UserProgressionState()
        quest = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())[0]
        assert quest.title == "Burn Small"
        assert quest.description == "burn_small description"
        assert quest.icon == "⚡"
        assert quest.target == 100
        assert quest.xp_reward == 50

    def test_rank_gates_templates(self, small_catalog, ranks):
        low = UserProgressionState(xp=0)
        regenerate(low, NOW, small_catalog, ranks, BrokenRandom())
        assert "burn_big" not in {q.quest_id for q in low.active_quests}

        high = UserProgressionState(xp=1500)
        regenerate(high, NOW, small_catalog, ranks, BrokenRandom())
        assert {"burn_small", "count_small", "burn_big"} <= {q.quest_id for q in high.active_quests}

    def test_noop_while_daily_open(self, small_catalog, ranks):
        state = UserProgressionState(active_quests=[
            instance("burn_small", progress=40),
            instance("weekly_burn", scope="weekly", expires_at=WEEKLY_RESET),
        ])
        before = state.model_dump()
        regenerate(state, NOW, small_catalog, ranks, BrokenRandom())
        assert state.model_dump() == before

    def test_second_call_is_noop(self, small_catalog, ranks):
        state = UserProgressionState(xp=1500)
        regenerate(state, NOW, small_catalog, ranks, seeded(3))
        first = state.model_dump()
        regenerate(state, NOW + timedelta(hours=2), small_catalog, ranks, BrokenRandom())
        assert state.model_dump() == first

    def test_expired_daily_rolls_keeping_weekly(self, small_catalog, ranks):
        weekly = instance("weekly_burn", scope="weekly", progress=300, expires_at=WEEKLY_RESET)
        state = UserProgressionState(active_quests=[
            instance("burn_small", progress=90, expires_at=YESTERDAY_RESET),
            weekly,
        ])
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())

        daily = [q for q in quests if q.scope == "daily"]
        assert all(q.progress == 0 and q.expires_at == DAILY_RESET for q in daily)
        kept = [q for q in quests if q.scope == "weekly"]
        assert len(kept) == 1
        assert kept[0].progress == 300

    def test_completed_today_carried_over(self, small_catalog, ranks):
        done = instance("count_small", target=2, progress=2, completed=True,
                        completed_at=NOW - timedelta(hours=1))
        state = UserProgressionState(active_quests=[done])
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())

        assert quests[0].quest_id == "count_small"
        assert quests[0].completed
        assert len([q for q in quests if q.scope == "daily" and not q.completed]) == 2

    def test_completed_yesterday_dropped(self, small_catalog, ranks):
        old = instance("count_small", target=2, progress=2, completed=True,
                       completed_at=YESTERDAY_RESET - timedelta(hours=3),
                       expires_at=YESTERDAY_RESET)
        state = UserProgressionState(active_quests=[old])
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())
        assert not any(q.completed for q in quests)

    def test_completed_live_weekly_not_duplicated(self, small_catalog, ranks):
        weekly = instance("weekly_burn", scope="weekly", target=1000, progress=1000, completed=True,
                          completed_at=NOW - timedelta(hours=1), expires_at=WEEKLY_RESET)
        state = UserProgressionState(active_quests=[weekly])
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())
        assert [q.quest_id for q in quests if q.scope == "weekly"] == ["weekly_burn"]

    def test_expired_weekly_replaced(self, small_catalog, ranks):
        stale = instance("weekly_burn", scope="weekly", progress=10,
                         expires_at=WEEKLY_RESET - timedelta(days=7))
        state = UserProgressionState(active_quests=[stale])
        quests = regenerate(state, NOW, small_catalog, ranks, BrokenRandom())
        weekly = [q for q in quests if q.scope == "weekly"]
        assert weekly[0].progress == 0
        assert weekly[0].expires_at == WEEKLY_RESET

    def test_empty_pool_generates_nothing(self, ranks):
        from fitquest.engine.catalog import QuestCatalog
        state = UserProgressionState()
        assert regenerate(state, NOW, QuestCatalog([], {}), ranks, BrokenRandom()) == []

    def test_default_catalog_counts(self, ranks):
        state = UserProgressionState(xp=12000)
        quests = regenerate(state, NOW, default_catalog(), ranks, seeded(11))
        daily = [q for q in quests if q.scope == "daily"]
        weekly = [q for q in quests if q.scope == "weekly"]
        assert len(daily) == 3
        assert len({q.quest_id for q in daily}) == 3
        assert len(weekly) == 1

    def test_seeded_regeneration_reproducible(self, ranks):
        catalog = default_catalog()
        a = UserProgressionState(xp=3000)
        b = UserProgressionState(xp=3000)
        regenerate(a, NOW, catalog, ranks, seeded(99))
        regenerate(b, NOW, catalog, ranks, seeded(99))
        assert a.model_dump() == b.model_dump()

    def test_configured_quest_counts(self, ranks):
        state = UserProgressionState(xp=50000)
        custom = Settings(quests_per_day=5, weekly_quests=2)
        quests = regenerate(state, NOW, default_catalog(), ranks, seeded(5), custom)
        assert len([q for q in quests if q.scope == "daily"]) == 5
        assert len([q for q in quests if q.scope == "weekly"]) == 2


class TestVisibleQuests:
    def test_hides_expired(self):
        state = UserProgressionState(active_quests=[
            instance("old", expires_at=YESTERDAY_RESET),
            instance("live"),
        ])
        assert [q.quest_id for q in visible_quests(state, NOW)] == ["live"]

    def test_has_valid_daily(self):
        assert has_valid_daily([instance("live")], NOW)
        assert not has_valid_daily([instance("live", progress=100, completed=True, completed_at=NOW)], NOW)
        assert not has_valid_daily([instance("weekly", scope="weekly")], NOW)
