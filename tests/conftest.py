"""Shared fixtures for Anitrack tests."""

import pytest

from anitrack.domain.watchlist import Entry, WatchlistStore


@pytest.fixture
def store(tmp_path):
    """A fresh watchlist store in a temporary database file."""
    watchlist = WatchlistStore(tmp_path / "watchlist.db")
    yield watchlist
    watchlist.close()


@pytest.fixture
def make_entry():
    """Factory for valid entries; keyword arguments override the defaults."""

    def _make(item_id: int, **overrides) -> Entry:
        fields = {
            "id": item_id,
            "status": "watching",
            "score": 7,
            "progress": 3,
            "notes": "",
            "favorite": False,
            "start_date": "2023-01-15",
            "end_date": None,
            "title": f"Show {item_id}",
            "image_reference": f"https://img.example/{item_id}.jpg",
        }
        fields.update(overrides)
        return Entry(**fields)

    return _make
