"""
Sync command handlers for Anitrack.

Handles: export, import
"""

from pathlib import Path
from typing import Optional

from anitrack.context import AppContext
from anitrack.core.output import log
from anitrack.domain import sync
from anitrack.domain.sync import ImportOptions, ImportOutcome
from anitrack.exceptions import AnitrackError


def handle_export_command(
    ctx: AppContext, scope: Optional[str] = None, output: Optional[Path] = None
) -> int:
    """Write a snapshot of the watchlist to a file."""
    scope = scope or ctx.config.sync.default_scope

    try:
        result = sync.export_to_file(
            ctx.store,
            scope=scope,
            path=output,
            export_dir=ctx.config.export_dir(),
            device_name=ctx.config.sync.resolved_device_name(),
        )
    except (AnitrackError, ValueError) as e:
        log(f"❌ Export failed: {e}", level="error")
        return 1
    except OSError as e:
        log(f"❌ Could not write export file: {e}", level="error")
        return 1

    log(
        f"✓ Exported {result.entry_count} entries ({result.export_scope}) to {result.path}",
        level="success",
    )
    return 0


def handle_import_command(
    ctx: AppContext,
    path: Path,
    merge_strategy: Optional[str] = None,
    conflict_resolution: Optional[str] = None,
    scope: Optional[str] = None,
) -> int:
    """Import a snapshot file into the watchlist."""
    try:
        options = ImportOptions.from_strings(
            merge_strategy or ctx.config.sync.default_merge_strategy,
            conflict_resolution or ctx.config.sync.default_conflict_resolution,
            scope or ctx.config.sync.default_scope,
        )
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return 1

    try:
        outcome = sync.import_from_file(ctx.store, path, options)
    except AnitrackError as e:
        log(f"❌ Import aborted, nothing was changed: {e}", level="error")
        return 1
    except OSError as e:
        log(f"❌ Could not read import file: {e}", level="error")
        return 1

    print_outcome(outcome)
    return 1 if outcome.errors else 0


def print_outcome(outcome: ImportOutcome) -> None:
    """Print the import summary and any per-entry failures."""
    log(
        f"📥 Import ({outcome.merge_strategy.value}, "
        f"{outcome.conflict_resolution.value}, scope={outcome.scope})",
        level="info",
    )
    log(f"  Total:    {outcome.total}", level="info")
    log(f"  Imported: {outcome.imported}", level="info")
    log(f"  Updated:  {outcome.updated}", level="info")
    log(f"  Skipped:  {outcome.skipped} ({outcome.conflicts} conflicts)", level="info")

    if outcome.errors:
        log(f"  Failed:   {outcome.failed}", level="warning")
        for error in outcome.errors:
            log(f"    ✗ #{error.index} id={error.item_id}: {error.message}", level="warning")
