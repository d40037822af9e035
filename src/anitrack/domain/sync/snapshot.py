"""
Snapshot codec: watchlist entries <-> portable JSON document.

Pure functions only; reading and writing files is left to the caller.

Document layout (format 2.x):

    {
      "format_version": "2.0",
      "created_at": "2024-01-31T22:59:59+00:00",
      "metadata": {"app_version", "os", "device_name", "export_scope", "entry_count"},
      "entries": [{"id", "status", "score", "progress", "notes", "favorite",
                   "start_date", "end_date", "title", "image_reference"}, ...]
    }

Format 1.x files (written by the earlier desktop app) use the keys
``version``, ``timestamp``, ``anime_list``, ``anime_id``, ``image_url`` and
``export_type``; they are read transparently.
"""

import json
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from loguru import logger

from anitrack.domain.watchlist.models import Entry, parse_scope
from anitrack.exceptions import FormatError, VersionError

FORMAT_VERSION = "2.0"
SUPPORTED_MAJOR_VERSIONS = (1, 2)

# Key names per major version: (version, created_at, entries, entry id, image, scope)
_V1_KEYS = ("version", "timestamp", "anime_list", "anime_id", "image_url", "export_type")
_V2_KEYS = ("format_version", "created_at", "entries", "id", "image_reference", "export_scope")

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


@dataclass(frozen=True)
class SnapshotMetadata:
    """Who produced a snapshot, and what it contains."""

    app_version: str = ""
    os: str = ""
    device_name: str = ""
    export_scope: str = "all"
    entry_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "app_version": self.app_version,
            "os": self.os,
            "device_name": self.device_name,
            "export_scope": self.export_scope,
            "entry_count": self.entry_count,
        }


@dataclass(frozen=True)
class Snapshot:
    """Immutable point-in-time export of (part of) a watchlist."""

    format_version: str
    created_at: Optional[datetime]
    metadata: SnapshotMetadata
    entries: tuple[Entry, ...]


def serialize(
    entries: Iterable[Entry],
    metadata: SnapshotMetadata,
    created_at: Optional[datetime] = None,
) -> bytes:
    """Encode entries plus export metadata as a snapshot document.

    ``metadata.entry_count`` is always replaced by the real number of entries.

    Args:
        entries: Entries to include, in output order
        metadata: Producer information and export scope
        created_at: Snapshot timestamp (default: now, UTC)

    Returns:
        UTF-8 encoded JSON with a fixed key order
    """
    entries = list(entries)
    created_at = created_at or datetime.now(timezone.utc)

    meta = metadata.to_dict()
    meta["entry_count"] = len(entries)

    document = {
        "format_version": FORMAT_VERSION,
        "created_at": created_at.isoformat(),
        "metadata": meta,
        "entries": [entry.to_dict() for entry in entries],
    }
    return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def serialize_snapshot(snapshot: Snapshot) -> bytes:
    """Encode an existing Snapshot value."""
    return serialize(snapshot.entries, snapshot.metadata, snapshot.created_at)


def parse_major_version(format_version: str) -> int:
    """Major component of a "major.minor[.patch]" version string.

    Raises:
        VersionError: If the major component is not a supported integer
    """
    major_text = format_version.strip().split(".", 1)[0]
    try:
        major = int(major_text)
    except ValueError:
        raise VersionError(format_version, SUPPORTED_MAJOR_VERSIONS) from None
    if major not in SUPPORTED_MAJOR_VERSIONS:
        raise VersionError(format_version, SUPPORTED_MAJOR_VERSIONS)
    return major


def parse(data: bytes) -> Snapshot:
    """Decode a snapshot document.

    Only the document structure is checked here; domain constraints on the
    entries (status, score range, ...) are left to the importer so a single
    bad entry does not reject the whole file. Missing optional fields take
    their empty value.

    Raises:
        FormatError: If the bytes are not a snapshot document
        VersionError: If the major format version is not supported
    """
    try:
        document = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise FormatError(f"Snapshot is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise FormatError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise FormatError("Snapshot document must be a JSON object")

    raw_version = document.get("format_version", document.get("version"))
    if raw_version is None:
        raise FormatError("Snapshot has no format version")
    if not isinstance(raw_version, str):
        raise FormatError(f"Format version must be a string, got {raw_version!r}")

    major = parse_major_version(raw_version)
    _, created_key, entries_key, id_key, image_key, scope_key = (
        _V1_KEYS if major == 1 else _V2_KEYS
    )

    raw_entries = document.get(entries_key, [])
    if raw_entries is None:
        raw_entries = []
    if not isinstance(raw_entries, list):
        raise FormatError(f"'{entries_key}' must be a list")

    entries = []
    for index, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            raise FormatError(f"Entry #{index} must be a JSON object")
        entries.append(_entry_from_dict(raw, id_key, image_key))

    raw_metadata = document.get("metadata")
    metadata = _metadata_from_dict(raw_metadata, scope_key)
    claimed_count = raw_metadata.get("entry_count") if raw_metadata else None
    if claimed_count is not None and claimed_count != len(entries):
        logger.warning(
            f"Snapshot metadata claims {claimed_count} entries but contains "
            f"{len(entries)}; using the actual count"
        )
    metadata = replace(metadata, entry_count=len(entries))

    return Snapshot(
        format_version=raw_version,
        created_at=_parse_timestamp(document.get(created_key)),
        metadata=metadata,
        entries=tuple(entries),
    )


def _entry_from_dict(raw: dict[str, Any], id_key: str, image_key: str) -> Entry:
    def text(key: str) -> Any:
        value = raw.get(key)
        return "" if value is None else value

    status = text("status")
    if isinstance(status, str):
        status = status.strip().lower()

    return Entry(
        id=raw.get(id_key),
        status=status,
        score=raw.get("score") if raw.get("score") is not None else 0,
        progress=raw.get("progress") if raw.get("progress") is not None else 0,
        notes=text("notes"),
        favorite=raw.get("favorite") if raw.get("favorite") is not None else False,
        start_date=raw.get("start_date"),
        end_date=raw.get("end_date"),
        title=text("title"),
        image_reference=text(image_key),
    )


def _metadata_from_dict(raw: Any, scope_key: str) -> SnapshotMetadata:
    if raw is None:
        return SnapshotMetadata()
    if not isinstance(raw, dict):
        raise FormatError("'metadata' must be a JSON object")

    raw_scope = raw.get(scope_key) or "all"
    try:
        scope = parse_scope(str(raw_scope))
    except ValueError:
        # Informational only; the importer's own scope decides filtering
        scope = str(raw_scope)

    entry_count = raw.get("entry_count", 0)
    if not isinstance(entry_count, int) or isinstance(entry_count, bool):
        raise FormatError(f"'entry_count' must be an integer, got {entry_count!r}")

    return SnapshotMetadata(
        app_version=str(raw.get("app_version") or ""),
        os=str(raw.get("os") or ""),
        device_name=str(raw.get("device_name") or ""),
        export_scope=scope,
        entry_count=entry_count,
    )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise FormatError(f"Snapshot timestamp must be a string, got {value!r}")
    # Some producers write nanosecond precision; datetime stops at microseconds
    normalized = _FRACTION_RE.sub(r"\1", value.strip())
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as e:
        raise FormatError(f"Invalid snapshot timestamp {value!r}") from e
