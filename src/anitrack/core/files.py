"""
File helpers for snapshot export/import.

OSError from these helpers propagates to the caller.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional


def read_bytes(path: Path) -> bytes:
    """Read a whole file as bytes."""
    return Path(path).read_bytes()


def write_bytes(path: Path, data: bytes) -> None:
    """Write bytes to a file, creating parent directories as needed.

    The data goes to a sibling temp file first and is then moved into
    place.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_name(path.name + ".tmp")
    try:
        temp_path.write_bytes(data)
        temp_path.replace(path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def default_export_path(
    export_dir: Path, scope: str, now: Optional[datetime] = None
) -> Path:
    """Build the default snapshot filename for an export.

    Args:
        export_dir: Directory the snapshot goes into
        scope: Export scope ("all" or a status)
        now: Timestamp for the filename (default: local now)

    Returns:
        Path like ``export_dir/anitrack_export_all_20240131_235959.json``
    """
    now = now or datetime.now()
    return Path(export_dir) / f"anitrack_export_{scope}_{now.strftime('%Y%m%d_%H%M%S')}.json"
