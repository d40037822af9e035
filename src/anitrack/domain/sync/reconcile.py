"""
Reconciliation of an incoming batch of entries into the watchlist store.

The per-entry decision is a pure function of four inputs (does the id already
exist, merge strategy, conflict resolution, is the incoming end date newer),
kept separate from the loop that applies decisions to the store.

Decision table:

    exists  merge_strategy  conflict_resolution  action          counter
    ------  --------------  -------------------  --------------  --------
    no      any             -                    INSERT          imported
    yes     replace         -                    INSERT          imported
    yes     skip_existing   -                    SKIP            skipped
    yes     merge           keep_existing        KEEP_EXISTING   skipped (+conflicts)
    yes     merge           use_imported         OVERWRITE       updated
    yes     merge           keep_newer           OVERWRITE if incoming end_date is newer,
                                                 else KEEP_EXISTING
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from loguru import logger

from anitrack.domain.watchlist.models import SCOPE_ALL, Entry, parse_scope, scope_matches
from anitrack.domain.watchlist.store import WatchlistStore
from anitrack.exceptions import StoreError, ValidationError

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class MergeStrategy(str, Enum):
    """Whether the store is cleared before import or merged in place."""

    MERGE = "merge"
    REPLACE = "replace"
    SKIP_EXISTING = "skip_existing"


class ConflictResolution(str, Enum):
    """Tie-break for an incoming entry whose id is already tracked (merge only)."""

    KEEP_EXISTING = "keep_existing"
    USE_IMPORTED = "use_imported"
    KEEP_NEWER = "keep_newer"


class Action(str, Enum):
    INSERT = "insert"
    OVERWRITE = "overwrite"
    SKIP = "skip"
    KEEP_EXISTING = "keep_existing"  # skipped because the stored entry won a conflict


def decide(
    exists: bool,
    merge_strategy: MergeStrategy,
    conflict_resolution: ConflictResolution,
    incoming_is_newer: Optional[bool] = None,
) -> Action:
    """Pick the action for one incoming entry.

    Args:
        exists: Whether an entry with the same id is already in the store
        merge_strategy: Batch-level strategy
        conflict_resolution: Per-entry tie-break (consulted only under merge)
        incoming_is_newer: keep_newer comparison result; None is treated as False

    Returns:
        The Action to apply
    """
    if not exists or merge_strategy is MergeStrategy.REPLACE:
        return Action.INSERT

    if merge_strategy is MergeStrategy.SKIP_EXISTING:
        return Action.SKIP

    if conflict_resolution is ConflictResolution.USE_IMPORTED:
        return Action.OVERWRITE

    if conflict_resolution is ConflictResolution.KEEP_NEWER and incoming_is_newer:
        return Action.OVERWRITE

    return Action.KEEP_EXISTING


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string; absent or malformed gives None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    # fromisoformat alone also takes compact and week dates
    if not _DATE_RE.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def end_date_is_newer(existing: Entry, incoming: Entry) -> bool:
    """keep_newer tie-break on end_date.

    Incoming wins if both dates parse and incoming is strictly later, or if
    only the incoming date parses. Otherwise the existing entry wins.
    """
    existing_date = parse_date(existing.end_date)
    incoming_date = parse_date(incoming.end_date)

    if incoming_date is None:
        return False
    if existing_date is None:
        return True
    return incoming_date > existing_date


@dataclass(frozen=True)
class EntryError:
    """One entry that could not be applied."""

    index: int  # Position within the scope-filtered batch
    item_id: object
    error_type: str
    message: str


@dataclass
class ImportOutcome:
    """Report of what an import did.

    ``conflicts`` is a sub-count of ``skipped``: entries whose id collided
    under the merge strategy and where the stored entry was kept.
    """

    scope: str = SCOPE_ALL
    merge_strategy: MergeStrategy = MergeStrategy.MERGE
    conflict_resolution: ConflictResolution = ConflictResolution.KEEP_EXISTING
    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    conflicts: int = 0
    errors: List[EntryError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def applied(self) -> int:
        return self.imported + self.updated

    def is_consistent(self) -> bool:
        """Every filtered entry is accounted for exactly once."""
        return self.total == self.imported + self.updated + self.skipped + self.failed

    def record(self, action: Action) -> None:
        if action is Action.INSERT:
            self.imported += 1
        elif action is Action.OVERWRITE:
            self.updated += 1
        else:
            self.skipped += 1
            if action is Action.KEEP_EXISTING:
                self.conflicts += 1


def reconcile(
    entries: Iterable[Entry],
    store: WatchlistStore,
    scope: str = SCOPE_ALL,
    merge_strategy: MergeStrategy = MergeStrategy.MERGE,
    conflict_resolution: ConflictResolution = ConflictResolution.KEEP_EXISTING,
) -> ImportOutcome:
    """Merge incoming entries into the store.

    Entries outside ``scope`` are ignored entirely. Under ``replace`` the store
    is cleared first and the clear plus every insert run as one transaction.
    Otherwise each entry is applied on its own; a failing entry is recorded in
    ``errors`` and the rest of the batch still runs.

    Args:
        entries: Incoming entries in processing order
        store: Store to merge into
        scope: "all" or a status to restrict the batch to
        merge_strategy: Batch-level strategy
        conflict_resolution: Tie-break for existing ids under merge

    Returns:
        ImportOutcome describing what was applied

    Raises:
        StoreError: If the replace clear fails (nothing is applied)
    """
    scope = parse_scope(scope)
    merge_strategy = MergeStrategy(merge_strategy)
    conflict_resolution = ConflictResolution(conflict_resolution)

    batch = [entry for entry in entries if scope_matches(scope, entry.status)]
    outcome = ImportOutcome(
        scope=scope,
        merge_strategy=merge_strategy,
        conflict_resolution=conflict_resolution,
        total=len(batch),
    )

    logger.info(
        f"Reconciling {len(batch)} entries (scope={scope}, "
        f"strategy={merge_strategy.value}, conflicts={conflict_resolution.value})"
    )

    if merge_strategy is MergeStrategy.REPLACE:
        with store.transaction():
            store.clear()
            logger.info("Cleared existing watchlist for replace import")
            _apply_batch(batch, store, outcome)
    else:
        _apply_batch(batch, store, outcome)

    logger.info(
        f"Import finished: {outcome.imported} imported, {outcome.updated} updated, "
        f"{outcome.skipped} skipped ({outcome.conflicts} conflicts), "
        f"{outcome.failed} failed"
    )
    return outcome


def _apply_batch(batch: List[Entry], store: WatchlistStore, outcome: ImportOutcome) -> None:
    for index, entry in enumerate(batch):
        try:
            action = _apply_entry(entry, store, outcome)
        except (ValidationError, StoreError) as e:
            logger.warning(f"Skipping entry #{index} (id={entry.id!r}): {e}")
            outcome.errors.append(
                EntryError(
                    index=index,
                    item_id=entry.id,
                    error_type=type(e).__name__,
                    message=str(e),
                )
            )
            continue
        outcome.record(action)


def _apply_entry(entry: Entry, store: WatchlistStore, outcome: ImportOutcome) -> Action:
    entry.validate()

    existing = store.get(entry.id)
    incoming_is_newer = None
    if (
        existing is not None
        and outcome.merge_strategy is MergeStrategy.MERGE
        and outcome.conflict_resolution is ConflictResolution.KEEP_NEWER
    ):
        incoming_is_newer = end_date_is_newer(existing, entry)

    action = decide(
        existing is not None,
        outcome.merge_strategy,
        outcome.conflict_resolution,
        incoming_is_newer,
    )
    logger.debug(f"Entry {entry.id}: {action.value}")

    if action in (Action.INSERT, Action.OVERWRITE):
        store.upsert(entry)
    return action
