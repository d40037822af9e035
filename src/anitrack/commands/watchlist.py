"""
Watchlist command handlers for Anitrack.

Handles: list, show, add, remove, search, stats
"""

from typing import Iterable, Optional

from loguru import logger
from rich.table import Table

from anitrack.context import AppContext
from anitrack.core.output import log
from anitrack.domain.watchlist import Entry, get_watchlist_stats
from anitrack.exceptions import AnitrackError


def _entries_table(entries: Iterable[Entry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Fav", justify="center")
    table.add_column("Started")
    table.add_column("Finished")

    for entry in entries:
        table.add_row(
            str(entry.id),
            entry.title or "-",
            entry.status,
            str(entry.score) if entry.score else "-",
            str(entry.progress),
            "★" if entry.favorite else "",
            entry.start_date or "",
            entry.end_date or "",
        )
    return table


def handle_list_command(ctx: AppContext, status: Optional[str] = None) -> int:
    """Show the watchlist, optionally limited to one status."""
    try:
        entries = ctx.store.list(status)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    if not entries:
        log("No entries found", level="info")
        return 0

    title = f"Watchlist ({status})" if status else "Watchlist"
    ctx.console.print(_entries_table(entries, f"{title} - {len(entries)} entries"))
    return 0


def handle_show_command(ctx: AppContext, item_id: int) -> int:
    """Show one entry including its notes."""
    try:
        entry = ctx.store.get(item_id)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    if entry is None:
        log(f"❌ Entry {item_id} is not in your list", level="error")
        return 1

    ctx.console.print(_entries_table([entry], entry.title or f"Entry {entry.id}"))
    if entry.notes:
        ctx.console.print(f"Notes: {entry.notes}", markup=False)
    return 0


def handle_add_command(ctx: AppContext, entry: Entry) -> int:
    """Add an entry, or update it if the id is already tracked."""
    try:
        existed = ctx.store.get(entry.id) is not None
        stored = ctx.store.upsert(entry)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    verb = "Updated" if existed else "Added"
    log(f"✓ {verb} {stored.title or stored.id} ({stored.status})", level="success")
    return 0


def handle_remove_command(ctx: AppContext, item_id: int) -> int:
    try:
        removed = ctx.store.delete(item_id)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    if not removed:
        log(f"Entry {item_id} was not in your list", level="warning")
        return 1

    log(f"✓ Removed entry {item_id}", level="success")
    return 0


def handle_search_command(ctx: AppContext, query: str) -> int:
    """Search entries by title."""
    try:
        entries = ctx.store.search(query)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    logger.debug(f"Search {query!r} matched {len(entries)} entries")
    if not entries:
        log(f"No entries match '{query}'", level="info")
        return 0

    ctx.console.print(_entries_table(entries, f"Search: {query}"))
    return 0


def handle_stats_command(ctx: AppContext) -> int:
    """Show status breakdown plus progress and score totals."""
    try:
        stats = get_watchlist_stats(ctx.store)
    except AnitrackError as e:
        log(f"❌ {e}", level="error")
        return 1

    table = Table(title="📊 Watchlist Stats", show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Watching", str(stats.watching))
    table.add_row("Completed", str(stats.completed))
    table.add_row("On hold", str(stats.on_hold))
    table.add_row("Dropped", str(stats.dropped))
    table.add_row("Planned", str(stats.planned))
    table.add_row("Total", str(stats.total))
    table.add_row("Episodes watched", str(stats.total_progress))
    table.add_row("Mean score", f"{stats.mean_score:.2f}" if stats.mean_score else "-")
    ctx.console.print(table)
    return 0
