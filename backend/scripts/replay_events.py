"""
Replay a log of user activity through the progression engine.

Starts from a saved UserProgressionState (or a fresh one), applies every event
in timestamp order, then prints the resulting XP, rank, streak and quests.
With a fixed --seed the output is reproducible, which makes this handy for
checking a catalog or rank-table change against real activity.

Event log format (JSON list):
    [
      {"type": "workout", "calories": 320, "at": "2026-03-02T07:15:00Z"},
      {"type": "meal", "at": "2026-03-02T12:40:00Z"},
      {"type": "check", "at": "2026-03-05T09:00:00Z"}
    ]

Usage:
    cd backend
    python scripts/replay_events.py events.json [--state state.json] [--seed 42] [--dry-run]
"""
import argparse
import json
import logging
import os
import sys
from datetime import datetime

# Add project root to path so we can import engine modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fitquest.config import SETTINGS
from fitquest.engine.progression import ProgressionEngine
from fitquest.engine.selector import seeded
from fitquest.models import UserProgressionState

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_timestamp(ts: str) -> datetime | None:
    if not ts:
        return None
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None


def load_state(path: str | None) -> UserProgressionState:
    if not path or not os.path.exists(path):
        return UserProgressionState()
    with open(path) as fh:
        return UserProgressionState.model_validate(json.load(fh))


def replay(engine: ProgressionEngine, state: UserProgressionState, events: list[dict]) -> dict:
    """
    Apply events to `state` in place. Returns counters for the summary.
    Events with an unknown type or unreadable timestamp are skipped.
    """
    totals = {"workouts": 0, "meals": 0, "quests_completed": 0, "xp_decayed": 0, "rank_ups": []}

    timed = [(parse_timestamp(ev.get("at", "")), ev) for ev in events]
    for at, ev in sorted((t for t in timed if t[0] is not None), key=lambda t: t[0]):
        kind = ev.get("type")

        if kind == "workout":
            engine.apply_decay(state, at)
            result = engine.log_workout(state, ev.get("calories", 0), at)
            totals["workouts"] += 1
        elif kind == "meal":
            result = engine.log_meal(state, at)
            totals["meals"] += 1
        elif kind == "check":
            totals["xp_decayed"] += engine.apply_decay(state, at).decay
            engine.quests(state, at)
            continue
        else:
            logger.warning("Skipping event with unknown type %r", kind)
            continue

        totals["quests_completed"] += len(result.quest_completions)
        if result.rank_up:
            totals["rank_ups"].append(result.rank_up)

    skipped = sum(1 for t in timed if t[0] is None)
    if skipped:
        logger.warning("Skipped %d event(s) without a valid timestamp", skipped)
    return totals


def run(events_path: str, state_path: str | None, seed: int | None, dry_run: bool = False):
    with open(events_path) as fh:
        events = json.load(fh)

    state = load_state(state_path)
    engine = ProgressionEngine(rng=seeded(seed), settings=SETTINGS)

    print(f"\n🔁 Replaying {len(events)} events (seed={seed})\n")
    totals = replay(engine, state, events)

    info = engine.rank_info(state)
    print(f"  Workouts: {totals['workouts']}  Meals: {totals['meals']}")
    print(f"  Quests completed: {totals['quests_completed']}  XP lost to decay: {totals['xp_decayed']}")
    print(f"  Rank ups: {', '.join(totals['rank_ups']) or 'none'}")
    print(f"\n  XP: {state.xp}  Rank: {info.current.rank} ({info.progress:.0%} to next)")
    print(f"  Streak: {state.streak} (longest {state.longest_streak})")
    print("\n  Active quests:")
    for q in state.active_quests:
        marker = "✅" if q.completed else "  "
        print(f"    {marker} [{q.scope}] {q.title}: {q.progress}/{q.target}")

    if dry_run or not state_path:
        print("\n  DRY RUN: state not written.")
        return

    with open(state_path, "w") as fh:
        json.dump(state.model_dump(mode="json"), fh, indent=2)
    print(f"\n✅ State saved to {state_path}\n")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay activity through the progression engine")
    parser.add_argument("events")
    parser.add_argument("--state")
    parser.add_argument("--seed", type=int, default=SETTINGS.random_seed)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    run(args.events, args.state, args.seed, dry_run=args.dry_run)
