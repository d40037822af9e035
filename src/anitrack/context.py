"""Application context for explicit state passing.

The AppContext bundles the loaded configuration, the open watchlist store and
the console, and is handed to every command handler instead of reaching for
module-level globals.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from anitrack.core.config import Config
from anitrack.core.console import get_console
from anitrack.domain.watchlist.store import WatchlistStore


@dataclass
class AppContext:
    """Application context passed to all command handlers.

    Attributes:
        config: Application configuration
        store: Open watchlist store (owned by whoever created the context)
        console: Rich Console for formatted output
    """

    config: Config
    store: WatchlistStore
    console: Console

    @classmethod
    def create(
        cls,
        config: Config,
        store: Optional[WatchlistStore] = None,
        console: Optional[Console] = None,
    ) -> "AppContext":
        """Create the context, opening the configured database if no store is given."""
        return cls(
            config=config,
            store=store if store is not None else WatchlistStore(config.database_path()),
            console=console if console is not None else get_console(),
        )

    def close(self) -> None:
        self.store.close()
