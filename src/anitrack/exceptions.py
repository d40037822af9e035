"""Anitrack exceptions for error handling."""


class AnitrackError(Exception):
    """Base exception for Anitrack operations."""

    pass


class SnapshotError(AnitrackError):
    """Base exception for snapshot decoding failures."""

    pass


class FormatError(SnapshotError):
    """Raised when snapshot bytes are not a well-formed snapshot document."""

    pass


class VersionError(SnapshotError):
    """Raised when a snapshot's major format version is not supported."""

    def __init__(self, format_version: str, supported: tuple[int, ...]):
        self.format_version = format_version
        self.supported = supported
        majors = ", ".join(str(m) for m in supported)
        super().__init__(
            f"Unsupported snapshot format version {format_version!r} "
            f"(supported major versions: {majors})"
        )


class ValidationError(AnitrackError):
    """Raised when an entry violates watchlist domain constraints."""

    def __init__(self, item_id: object, message: str):
        self.item_id = item_id
        super().__init__(f"Entry {item_id}: {message}")


class StoreError(AnitrackError):
    """Raised when a persistent store operation fails."""

    pass
