"""
Configuration management for Anitrack
"""

import os
import socket
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class DatabaseConfig:
    """Configuration for the local watchlist database."""

    path: Optional[str] = None  # Default: ~/.local/share/anitrack/anitrack.db


@dataclass
class SyncConfig:
    """Configuration for snapshot export and import."""

    export_dir: Optional[str] = None  # Default: data directory
    default_scope: str = "all"
    default_merge_strategy: str = "merge"
    default_conflict_resolution: str = "keep_existing"
    device_name: str = ""  # Empty means use the hostname

    def validate(self) -> None:
        """Validate sync configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        valid_scopes = {"all", "watching", "completed", "on_hold", "dropped", "planned"}
        valid_strategies = {"merge", "replace", "skip_existing"}
        valid_resolutions = {"keep_existing", "use_imported", "keep_newer"}

        if self.default_scope not in valid_scopes:
            raise ValueError(
                f"Invalid default scope: {self.default_scope!r}. "
                f"Valid scopes are: {sorted(valid_scopes)}"
            )
        if self.default_merge_strategy not in valid_strategies:
            raise ValueError(
                f"Invalid merge strategy: {self.default_merge_strategy!r}. "
                f"Valid strategies are: {sorted(valid_strategies)}"
            )
        if self.default_conflict_resolution not in valid_resolutions:
            raise ValueError(
                f"Invalid conflict resolution: {self.default_conflict_resolution!r}. "
                f"Valid resolutions are: {sorted(valid_resolutions)}"
            )

    def resolved_device_name(self) -> str:
        """Device name recorded in exported snapshots."""
        return self.device_name or socket.gethostname() or "Unknown"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/anitrack/anitrack.log
    console_output: bool = False  # Also echo log records to stderr


@dataclass
class Config:
    """Main configuration object."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def database_path(self) -> Path:
        """Resolve the database file, honouring ANITRACK_DB_PATH."""
        env_path = os.environ.get("ANITRACK_DB_PATH")
        if env_path:
            return Path(env_path).expanduser()
        if self.database.path:
            return Path(self.database.path).expanduser()
        return get_data_dir() / "anitrack.db"

    def export_dir(self) -> Path:
        if self.sync.export_dir:
            return Path(self.sync.export_dir).expanduser()
        return get_data_dir()

    def log_file(self) -> Path:
        if self.logging.log_file:
            return Path(self.logging.log_file).expanduser()
        return get_data_dir() / "anitrack.log"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "anitrack"
    return Path.home() / ".config" / "anitrack"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Current working directory
    2. XDG_CONFIG_HOME/anitrack (or ~/.config/anitrack)
    """
    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "anitrack"
    return Path.home() / ".local" / "share" / "anitrack"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Anitrack Configuration

[database]
# SQLite database file (default: ~/.local/share/anitrack/anitrack.db)
# path = "~/anitrack/anitrack.db"

[sync]
# Directory for exported snapshots (default: data directory)
# export_dir = "~/Documents/anitrack"

# Default status filter for export/import ("all" or a status)
default_scope = "all"

# How imports treat the existing list: merge, replace, skip_existing
default_merge_strategy = "merge"

# How merge resolves an entry that already exists:
# keep_existing, use_imported, keep_newer
default_conflict_resolution = "keep_existing"

# Device name recorded in exported snapshots (default: hostname)
# device_name = "laptop"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/anitrack/anitrack.log)
# log_file = "/path/to/custom/anitrack.log"

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables (also read from ~/.config/anitrack/.env):
    - ANITRACK_DB_PATH overrides [database] path
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return Config()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        return Config()

    config = Config()

    if "database" in toml_data:
        database_data = toml_data["database"]
        config.database = DatabaseConfig(
            path=database_data.get("path", config.database.path),
        )

    if "sync" in toml_data:
        sync_data = toml_data["sync"]
        config.sync = SyncConfig(
            export_dir=sync_data.get("export_dir", config.sync.export_dir),
            default_scope=sync_data.get("default_scope", config.sync.default_scope),
            default_merge_strategy=sync_data.get(
                "default_merge_strategy", config.sync.default_merge_strategy
            ),
            default_conflict_resolution=sync_data.get(
                "default_conflict_resolution",
                config.sync.default_conflict_resolution,
            ),
            device_name=sync_data.get("device_name", config.sync.device_name),
        )
        try:
            config.sync.validate()
        except ValueError as e:
            print(f"Warning: Invalid sync configuration: {e}")
            print("Using default sync configuration.")
            config.sync = SyncConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=logging_data.get("log_file", config.logging.log_file),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
