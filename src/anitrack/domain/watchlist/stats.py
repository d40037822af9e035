"""Watchlist statistics (status breakdown, progress and score totals)."""

from dataclasses import dataclass

from .models import Status
from .store import WatchlistStore


@dataclass(frozen=True)
class WatchlistStats:
    watching: int
    completed: int
    on_hold: int
    dropped: int
    planned: int
    total_progress: int
    mean_score: float

    @property
    def total(self) -> int:
        return self.watching + self.completed + self.on_hold + self.dropped + self.planned


def get_watchlist_stats(store: WatchlistStore) -> WatchlistStats:
    """Compute per-status counts plus progress sum and mean rated score."""
    counts = {status.value: store.count_by_status(status.value) for status in Status}
    aggregate = store.aggregate()

    return WatchlistStats(
        watching=counts[Status.WATCHING.value],
        completed=counts[Status.COMPLETED.value],
        on_hold=counts[Status.ON_HOLD.value],
        dropped=counts[Status.DROPPED.value],
        planned=counts[Status.PLANNED.value],
        total_progress=aggregate.progress_sum,
        mean_score=aggregate.score_mean,
    )
