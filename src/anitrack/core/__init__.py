"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database connection and schema (SQLite)
- Console and log output (Rich, Loguru)
- File helpers for snapshots
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)

from .database import (
    SCHEMA_VERSION,
    connect,
    init_database,
    migrate_database,
)

from .console import get_console, print_error, set_console
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Database
    "SCHEMA_VERSION",
    "connect",
    "init_database",
    "migrate_database",
    # Output
    "get_console",
    "print_error",
    "set_console",
    "log",
    "setup_loguru",
]
