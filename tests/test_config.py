"""Tests for configuration loading."""

from pathlib import Path

import pytest

from anitrack.core.config import Config, SyncConfig, load_config


@pytest.fixture
def xdg(tmp_path, monkeypatch):
    """Point the XDG directories into tmp_path and clear ANITRACK_DB_PATH."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    # setenv first so teardown also removes a value a .env file loads
    monkeypatch.setenv("ANITRACK_DB_PATH", "")
    monkeypatch.delenv("ANITRACK_DB_PATH")
    return tmp_path


def test_missing_file_creates_default(xdg):
    config_path = xdg / "config" / "anitrack" / "config.toml"

    config = load_config(config_path)

    assert config_path.exists()
    assert config == Config()
    # The template it wrote must itself load cleanly
    assert load_config(config_path) == Config()


def test_values_are_read(xdg):
    config_path = xdg / "config.toml"
    config_path.write_text(
        """
[database]
path = "~/watch.db"

[sync]
export_dir = "/backups"
default_scope = "completed"
default_merge_strategy = "replace"
default_conflict_resolution = "keep_newer"
device_name = "desk"

[logging]
level = "debug"
console_output = true
""",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.database_path() == Path("~/watch.db").expanduser()
    assert config.export_dir() == Path("/backups")
    assert config.sync.default_scope == "completed"
    assert config.sync.default_merge_strategy == "replace"
    assert config.sync.default_conflict_resolution == "keep_newer"
    assert config.sync.resolved_device_name() == "desk"
    assert config.logging.level == "DEBUG"
    assert config.logging.console_output is True


def test_invalid_sync_section_falls_back(xdg, capsys):
    config_path = xdg / "config.toml"
    config_path.write_text('[sync]\ndefault_merge_strategy = "overwrite"\n', encoding="utf-8")

    config = load_config(config_path)

    assert config.sync == SyncConfig()
    assert "Invalid sync configuration" in capsys.readouterr().out


def test_unparseable_file_falls_back(xdg, capsys):
    config_path = xdg / "config.toml"
    config_path.write_text("[sync\nthis is not toml", encoding="utf-8")

    assert load_config(config_path) == Config()
    assert "Using default configuration" in capsys.readouterr().out


def test_default_paths_follow_xdg(xdg):
    config = Config()

    assert config.database_path() == xdg / "data" / "anitrack" / "anitrack.db"
    assert config.log_file() == xdg / "data" / "anitrack" / "anitrack.log"
    assert config.export_dir() == xdg / "data" / "anitrack"


def test_env_overrides_database_path(xdg, monkeypatch):
    monkeypatch.setenv("ANITRACK_DB_PATH", str(xdg / "env.db"))
    config = Config()
    config.database.path = str(xdg / "file.db")

    assert config.database_path() == xdg / "env.db"


def test_dotenv_file_is_loaded(xdg):
    env_dir = xdg / "config" / "anitrack"
    env_dir.mkdir(parents=True)
    (env_dir / ".env").write_text(f"ANITRACK_DB_PATH={xdg / 'dotenv.db'}\n", encoding="utf-8")

    config = load_config(xdg / "config.toml")

    assert config.database_path() == xdg / "dotenv.db"


def test_device_name_defaults_to_hostname(monkeypatch):
    monkeypatch.setattr("anitrack.core.config.socket.gethostname", lambda: "box")

    assert SyncConfig().resolved_device_name() == "box"
