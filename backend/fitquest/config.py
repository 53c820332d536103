"""
Engine tunables, read from the environment once at import.
"""
import os
from dataclasses import dataclass
from datetime import time


def _parse_boundary(raw: str) -> time:
    hours, _, minutes = raw.partition(":")
    return time(int(hours), int(minutes or 0))


@dataclass(frozen=True)
class Settings:
    quests_per_day: int = 3
    weekly_quests: int = 1
    # Daily reset moment in UTC. 18:30 UTC is midnight in UTC+5:30.
    boundary_utc: time = time(18, 30)
    random_seed: int | None = None


def load_settings(environ: dict | None = None) -> Settings:
    env = os.environ if environ is None else environ
    seed = env.get("FITQUEST_RANDOM_SEED")
    return Settings(
        quests_per_day=int(env.get("FITQUEST_QUESTS_PER_DAY", 3)),
        weekly_quests=int(env.get("FITQUEST_WEEKLY_QUESTS", 1)),
        boundary_utc=_parse_boundary(env.get("FITQUEST_BOUNDARY_UTC", "18:30")),
        random_seed=int(seed) if seed else None,
    )


SETTINGS = load_settings()
