"""
Snapshot export/import operations for Anitrack

Export: store.list(scope) -> snapshot.serialize -> file
Import: file -> snapshot.parse -> reconcile(entries, policy, store)
"""

import platform
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from anitrack import __version__
from anitrack.core import files
from anitrack.domain.watchlist.models import SCOPE_ALL, parse_scope
from anitrack.domain.watchlist.store import WatchlistStore

from . import snapshot as codec
from .reconcile import ConflictResolution, ImportOutcome, MergeStrategy, reconcile
from .snapshot import FORMAT_VERSION, Snapshot, SnapshotMetadata


@dataclass(frozen=True)
class ImportOptions:
    """Policy for one import."""

    merge_strategy: MergeStrategy = MergeStrategy.MERGE
    conflict_resolution: ConflictResolution = ConflictResolution.KEEP_EXISTING
    scope: str = SCOPE_ALL

    @classmethod
    def from_strings(
        cls,
        merge_strategy: str,
        conflict_resolution: str,
        scope: Optional[str] = None,
    ) -> "ImportOptions":
        """Build options from user/config strings.

        Raises:
            ValueError: If any value is not recognised
        """
        try:
            strategy = MergeStrategy(merge_strategy.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid merge strategy: {merge_strategy!r}. "
                f"Valid strategies are: {[s.value for s in MergeStrategy]}"
            ) from None
        try:
            resolution = ConflictResolution(conflict_resolution.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid conflict resolution: {conflict_resolution!r}. "
                f"Valid resolutions are: {[r.value for r in ConflictResolution]}"
            ) from None
        return cls(
            merge_strategy=strategy,
            conflict_resolution=resolution,
            scope=parse_scope(scope),
        )


@dataclass(frozen=True)
class ExportResult:
    """Where an export went and what it contained."""

    path: Path
    entry_count: int
    export_scope: str
    created_at: datetime


def export_snapshot(
    store: WatchlistStore,
    scope: str = SCOPE_ALL,
    device_name: str = "",
    created_at: Optional[datetime] = None,
) -> Snapshot:
    """Capture the store (or one status of it) as a Snapshot.

    Args:
        store: Store to read from
        scope: "all" or a status
        device_name: Producer device recorded in metadata
        created_at: Snapshot timestamp (default: now, UTC)
    """
    scope = parse_scope(scope)
    entries = store.list(None if scope == SCOPE_ALL else scope)

    metadata = SnapshotMetadata(
        app_version=__version__,
        os=platform.system().lower(),
        device_name=device_name or platform.node() or "Unknown",
        export_scope=scope,
        entry_count=len(entries),
    )
    return Snapshot(
        format_version=FORMAT_VERSION,
        created_at=created_at or datetime.now(timezone.utc),
        metadata=metadata,
        entries=tuple(entries),
    )


def import_snapshot(
    store: WatchlistStore, data: bytes, options: ImportOptions
) -> ImportOutcome:
    """Parse snapshot bytes and reconcile them into the store.

    Raises:
        FormatError: If the bytes are not a snapshot (store untouched)
        VersionError: If the snapshot's major version is unsupported (store untouched)
        StoreError: If the replace clear fails (store untouched)
    """
    snap = codec.parse(data)
    logger.info(
        f"Importing snapshot v{snap.format_version} from "
        f"{snap.metadata.device_name or 'unknown device'} "
        f"({snap.metadata.entry_count} entries, scope={snap.metadata.export_scope})"
    )
    return reconcile(
        snap.entries,
        store,
        scope=options.scope,
        merge_strategy=options.merge_strategy,
        conflict_resolution=options.conflict_resolution,
    )


def export_to_file(
    store: WatchlistStore,
    scope: str = SCOPE_ALL,
    path: Optional[Path] = None,
    export_dir: Optional[Path] = None,
    device_name: str = "",
) -> ExportResult:
    """Export a snapshot to disk.

    Args:
        store: Store to read from
        scope: "all" or a status
        path: Target file (default: timestamped file in ``export_dir``)
        export_dir: Directory for the default filename (default: cwd)
        device_name: Producer device recorded in metadata

    Raises:
        OSError: If the file cannot be written
    """
    snap = export_snapshot(store, scope, device_name=device_name)
    if path is None:
        path = files.default_export_path(
            export_dir or Path.cwd(),
            snap.metadata.export_scope,
            snap.created_at.astimezone(),
        )

    files.write_bytes(path, codec.serialize_snapshot(snap))
    logger.info(f"Exported {snap.metadata.entry_count} entries to {path}")

    return ExportResult(
        path=Path(path),
        entry_count=snap.metadata.entry_count,
        export_scope=snap.metadata.export_scope,
        created_at=snap.created_at,
    )


def import_from_file(
    store: WatchlistStore, path: Path, options: ImportOptions
) -> ImportOutcome:
    """Read a snapshot file and import it.

    Raises:
        OSError: If the file cannot be read
        FormatError, VersionError, StoreError: See import_snapshot
    """
    data = files.read_bytes(path)
    logger.info(f"Read {len(data)} bytes from {path}")
    return import_snapshot(store, data, options)
