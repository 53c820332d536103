"""
Weighted sampling without replacement over quest templates.
"""
import random
from typing import Callable, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with random() -> float in [0, 1). random.Random qualifies."""

    def random(self) -> float: ...


def seeded(seed: int | None) -> RandomSource:
    return random.Random(seed)


def _default_weight(item) -> int:
    return item.weight


def weighted_sample(
    pool: Sequence[T],
    k: int,
    rng: RandomSource,
    weight: Callable[[T], int] = _default_weight,
) -> list[T]:
    """
    Pick up to k distinct items, favouring heavier ones.

    Draw-and-remove: each round draws r over the remaining total weight,
    walks the remaining items subtracting weights until r <= 0, takes that
    item and drops it from the pool. If the pool has no more than k items it
    is returned as-is without touching rng.
    """
    k = max(k, 0)
    if len(pool) <= k:
        return list(pool)

    remaining = list(pool)
    weights = [max(weight(item), 0) for item in remaining]
    selected: list[T] = []

    while len(selected) < k:
        total = sum(weights)
        r = rng.random() * total
        pick = 0
        if total > 0:
            # Falls through to the last positive-weight item on float drift.
            for i, w in enumerate(weights):
                if w <= 0:
                    continue
                pick = i
                r -= w
                if r <= 0:
                    break
        selected.append(remaining.pop(pick))
        weights.pop(pick)

    return selected
