"""Watchlist domain - tracked entries and their persistent store.

This domain handles:
- Entry model and domain validation
- SQLite-backed keyed store (get/list/upsert/delete/clear)
- Status counts and progress/score statistics
"""

from .models import (
    MAX_ID,
    MAX_SCORE,
    MIN_SCORE,
    SCOPE_ALL,
    Entry,
    Status,
    parse_scope,
    scope_matches,
)
from .stats import WatchlistStats, get_watchlist_stats
from .store import Aggregate, WatchlistStore

__all__ = [
    "MAX_ID",
    "MAX_SCORE",
    "MIN_SCORE",
    "SCOPE_ALL",
    "Entry",
    "Status",
    "parse_scope",
    "scope_matches",
    "WatchlistStats",
    "get_watchlist_stats",
    "Aggregate",
    "WatchlistStore",
]
