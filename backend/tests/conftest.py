from datetime import datetime, timezone

import pytest
from fitquest.config import Settings
from fitquest.engine.catalog import QuestCatalog, QuestTemplate
from fitquest.engine.ranks import RankTable
from fitquest.models import QuestInstance

# Wednesday, before the 18:30 UTC reset.
NOW = datetime(2026, 3, 4, 10, 0, tzinfo=timezone.utc)
DAILY_RESET = datetime(2026, 3, 4, 18, 30, tzinfo=timezone.utc)
WEEKLY_RESET = datetime(2026, 3, 8, 18, 30, tzinfo=timezone.utc)


class BrokenRandom:
    def random(self):
        raise AssertionError("random source should not be consulted")


def tpl(quest_id, scope="daily", category="workout", target=100, xp_reward=50, min_rank="E", difficulty="easy"):
    return QuestTemplate(quest_id, scope, category, quest_id.replace("_", " ").title(),
                         f"{quest_id} description", target, xp_reward, difficulty, "", min_rank)


def instance(quest_id, scope="daily", target=100, progress=0, xp_reward=50,
             completed=False, completed_at=None, expires_at=DAILY_RESET):
    return QuestInstance(
        quest_id=quest_id, scope=scope, title=quest_id, target=target, progress=progress,
        xp_reward=xp_reward, completed=completed, completed_at=completed_at, expires_at=expires_at,
    )


@pytest.fixture
def small_catalog():
    """Two E-rank dailies, one D-rank daily, one weekly of each trigger kind."""
    templates = [
        tpl("burn_small"),
        tpl("count_small", target=2, xp_reward=30),
        tpl("burn_big", target=500, xp_reward=120, min_rank="D", difficulty="hard"),
        tpl("weekly_burn", scope="weekly", target=1000, xp_reward=100),
    ]
    triggers = {
        "burn_small": "workout",
        "count_small": "workout_count",
        "burn_big": "workout",
        "weekly_burn": "workout",
    }
    return QuestCatalog(templates, triggers)


@pytest.fixture
def ranks():
    return RankTable()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def now():
    return NOW
