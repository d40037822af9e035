"""
Watchlist domain models.

Contains data structures for representing tracked watchlist entries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from anitrack.exceptions import ValidationError

MIN_SCORE = 0  # 0 means unrated
MAX_SCORE = 10
MAX_ID = 2**63 - 1  # largest SQLite INTEGER

SCOPE_ALL = "all"


class Status(str, Enum):
    """Closed set of watch states an entry can be in."""

    WATCHING = "watching"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"
    PLANNED = "planned"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


def parse_scope(value: Optional[str]) -> str:
    """Normalise a scope string ("all" or a status).

    Raises:
        ValueError: If the scope is neither "all" nor a known status
    """
    if value is None:
        return SCOPE_ALL
    scope = value.strip().lower()
    if scope == "full":
        # Older exports labelled the unfiltered scope "full"
        return SCOPE_ALL
    if scope != SCOPE_ALL and scope not in Status.values():
        raise ValueError(
            f"Invalid scope: {value!r}. Valid scopes are: "
            f"{[SCOPE_ALL] + Status.values()}"
        )
    return scope


def scope_matches(scope: str, status: str) -> bool:
    """True if an entry with ``status`` falls inside ``scope``."""
    return scope == SCOPE_ALL or (isinstance(status, str) and status.lower() == scope)


@dataclass(frozen=True)
class Entry:
    """One tracked item, keyed by the id the originating catalog assigned.

    ``title`` and ``image_reference`` are denormalized display fields and play
    no part in identity. Dates are ``YYYY-MM-DD`` strings; None means unknown.
    """

    id: int
    status: str
    score: int = 0
    progress: int = 0
    notes: str = ""
    favorite: bool = False
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    title: str = ""
    image_reference: str = ""

    def validate(self) -> None:
        """Check domain constraints.

        Raises:
            ValidationError: If any field is out of its domain
        """
        if not _is_int(self.id) or not 0 <= self.id <= MAX_ID:
            raise ValidationError(
                self.id, f"id must be an integer between 0 and {MAX_ID}, got {self.id!r}"
            )
        if self.status not in Status.values():
            raise ValidationError(
                self.id,
                f"unknown status {self.status!r} (expected one of {Status.values()})",
            )
        if not _is_int(self.score) or not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValidationError(
                self.id, f"score must be between {MIN_SCORE} and {MAX_SCORE}, got {self.score!r}"
            )
        if not _is_int(self.progress) or self.progress < 0:
            raise ValidationError(
                self.id, f"progress must be a non-negative integer, got {self.progress!r}"
            )
        if not isinstance(self.favorite, bool):
            raise ValidationError(self.id, f"favorite must be a boolean, got {self.favorite!r}")
        for name in ("notes", "title", "image_reference"):
            if not isinstance(getattr(self, name), str):
                raise ValidationError(self.id, f"{name} must be a string")
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(self.id, f"{name} must be a string or absent")

    def to_dict(self) -> dict[str, Any]:
        """Field mapping in canonical order."""
        return {
            "id": self.id,
            "status": self.status,
            "score": self.score,
            "progress": self.progress,
            "notes": self.notes,
            "favorite": self.favorite,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "title": self.title,
            "image_reference": self.image_reference,
        }


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid id/score/progress
    return isinstance(value, int) and not isinstance(value, bool)
