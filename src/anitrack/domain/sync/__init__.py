"""Sync domain - portable snapshots of the watchlist.

This domain handles:
- Snapshot codec (entries <-> versioned JSON document)
- Reconciliation of an incoming batch into the store
- Export: store -> snapshot file
- Import: snapshot file -> store, under a merge/conflict policy
"""

from .engine import (
    ExportResult,
    ImportOptions,
    export_snapshot,
    export_to_file,
    import_from_file,
    import_snapshot,
)
from .reconcile import (
    Action,
    ConflictResolution,
    EntryError,
    ImportOutcome,
    MergeStrategy,
    decide,
    end_date_is_newer,
    reconcile,
)
from .snapshot import (
    FORMAT_VERSION,
    SUPPORTED_MAJOR_VERSIONS,
    Snapshot,
    SnapshotMetadata,
    parse,
    serialize,
    serialize_snapshot,
)

__all__ = [
    "ExportResult",
    "ImportOptions",
    "export_snapshot",
    "export_to_file",
    "import_from_file",
    "import_snapshot",
    "Action",
    "ConflictResolution",
    "EntryError",
    "ImportOutcome",
    "MergeStrategy",
    "decide",
    "end_date_is_newer",
    "reconcile",
    "FORMAT_VERSION",
    "SUPPORTED_MAJOR_VERSIONS",
    "Snapshot",
    "SnapshotMetadata",
    "parse",
    "serialize",
    "serialize_snapshot",
]
