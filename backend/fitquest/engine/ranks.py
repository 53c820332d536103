"""
Rank table: pure lookups from total XP to a rank tier.
"""
from dataclasses import dataclass

RANK_ORDER: tuple[str, ...] = ("E", "D", "C", "B", "A", "S", "NATIONAL")


@dataclass(frozen=True)
class RankThreshold:
    rank: str           # one of RANK_ORDER
    min_xp: int
    color: str


@dataclass(frozen=True)
class RankInfo:
    current: RankThreshold
    next: RankThreshold | None
    progress: float
    xp_to_next: int


DEFAULT_THRESHOLDS: list[RankThreshold] = [
    RankThreshold("E",        0,     "#6b7280"),
    RankThreshold("D",        1000,  "#a855f7"),
    RankThreshold("C",        2500,  "#3b82f6"),
    RankThreshold("B",        5000,  "#22c55e"),
    RankThreshold("A",        10000, "#eab308"),
    RankThreshold("S",        20000, "#ef4444"),
    RankThreshold("NATIONAL", 50000, "#f97316"),
]


class RankTable:
    """
    Ordered XP thresholds. Built once from configuration and never mutated.
    Raises ValueError if the thresholds are not strictly increasing from 0
    or name ranks out of order.
    """

    def __init__(self, thresholds: list[RankThreshold] | None = None):
        rows = tuple(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
        if not rows:
            raise ValueError("rank table must not be empty")
        if rows[0].min_xp != 0:
            raise ValueError("rank table must start at 0 XP")
        for lower, upper in zip(rows, rows[1:]):
            if upper.min_xp <= lower.min_xp:
                raise ValueError(f"rank {upper.rank} threshold must exceed {lower.rank}")
        positions = [RANK_ORDER.index(r.rank) for r in rows if r.rank in RANK_ORDER]
        if len(positions) != len(rows) or positions != sorted(set(positions)):
            raise ValueError("rank table must list known ranks in ascending order")
        self._rows = rows

    @property
    def thresholds(self) -> tuple[RankThreshold, ...]:
        return self._rows

    def get_rank(self, xp: int) -> RankThreshold:
        xp = max(xp, 0)
        for row in reversed(self._rows):
            if row.min_xp <= xp:
                return row
        return self._rows[0]

    def get_next_rank(self, xp: int) -> RankThreshold | None:
        idx = self._rows.index(self.get_rank(xp))
        if idx + 1 < len(self._rows):
            return self._rows[idx + 1]
        return None

    def progress_fraction(self, xp: int) -> float:
        """Fraction of the way from the current rank to the next, 1.0 at the top."""
        xp = max(xp, 0)
        current = self.get_rank(xp)
        nxt = self.get_next_rank(xp)
        if nxt is None:
            return 1.0
        return (xp - current.min_xp) / (nxt.min_xp - current.min_xp)

    def rank_info(self, xp: int) -> RankInfo:
        xp = max(xp, 0)
        nxt = self.get_next_rank(xp)
        return RankInfo(
            current=self.get_rank(xp),
            next=nxt,
            progress=self.progress_fraction(xp),
            xp_to_next=nxt.min_xp - xp if nxt else 0,
        )

    def eligible_ranks(self, rank: str) -> list[str]:
        """Every rank at or below `rank`, lowest first."""
        names = [r.rank for r in self._rows]
        if rank not in names:
            return names[:1]
        return names[: names.index(rank) + 1]
