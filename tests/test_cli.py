"""End-to-end tests for the anitrack command line."""

import io
import json
from unittest.mock import patch

import pytest
from loguru import logger
from rich.console import Console

from anitrack.cli import build_parser, main
from anitrack.core.console import set_console
from anitrack.domain.watchlist import WatchlistStore
from anitrack.exceptions import StoreError


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Isolated config/data dirs and a captured console."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("ANITRACK_DB_PATH", "")
    monkeypatch.delenv("ANITRACK_DB_PATH")

    output = io.StringIO()
    set_console(Console(file=output, width=200, color_system=None))
    yield tmp_path, output
    set_console(None)
    logger.remove()


def _run(db, *args):
    return main(["--db", str(db), *args])


def test_no_subcommand_prints_help(cli_env, capsys):
    assert main([]) == 0
    assert "usage: anitrack" in capsys.readouterr().out


def test_parser_rejects_unknown_strategy():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["import", "x.json", "--merge", "overwrite"])


def test_add_list_and_remove(cli_env):
    tmp_path, output = cli_env
    db = tmp_path / "watch.db"

    exit_code = _run(
        db,
        "add",
        "5114",
        "--status",
        "watching",
        "--progress",
        "12",
        "--title",
        "Fullmetal Alchemist: Brotherhood",
    )
    assert exit_code == 0
    assert _run(db, "list") == 0
    assert "5114" in output.getvalue()

    with WatchlistStore(db) as store:
        entry = store.get(5114)
    assert entry.progress == 12
    assert entry.status == "watching"

    assert _run(db, "remove", "5114") == 0
    assert _run(db, "remove", "5114") == 1


def test_add_invalid_score_fails(cli_env):
    tmp_path, _ = cli_env
    db = tmp_path / "watch.db"

    assert _run(db, "add", "1", "--score", "11") == 1
    with WatchlistStore(db) as store:
        assert store.get(1) is None


def test_show_missing_entry(cli_env):
    tmp_path, _ = cli_env
    assert _run(tmp_path / "watch.db", "show", "404") == 1


def test_stats(cli_env):
    tmp_path, output = cli_env
    db = tmp_path / "watch.db"
    _run(db, "add", "1", "--status", "completed", "--score", "8", "--progress", "24")

    assert _run(db, "stats") == 0
    assert "Episodes watched" in output.getvalue()


def test_export_then_replace_import(cli_env):
    tmp_path, _ = cli_env
    source = tmp_path / "source.db"
    target = tmp_path / "target.db"
    snapshot = tmp_path / "snap.json"

    _run(source, "add", "1", "--status", "completed", "--end-date", "2023-12-01")
    _run(source, "add", "2", "--status", "planned")
    _run(target, "add", "99", "--status", "dropped")

    assert _run(source, "export", "-o", str(snapshot)) == 0
    document = json.loads(snapshot.read_text(encoding="utf-8"))
    assert document["metadata"]["entry_count"] == 2

    assert _run(target, "import", str(snapshot), "--merge", "replace") == 0
    with WatchlistStore(target) as store:
        assert sorted(e.id for e in store.list()) == [1, 2]


def test_export_uses_config_export_dir(cli_env):
    tmp_path, _ = cli_env
    db = tmp_path / "watch.db"
    _run(db, "add", "1")

    assert _run(db, "export", "--scope", "planned") == 0

    exports = list((tmp_path / "data" / "anitrack").glob("anitrack_export_planned_*.json"))
    assert len(exports) == 1


def test_import_malformed_file_fails(cli_env):
    tmp_path, output = cli_env
    db = tmp_path / "watch.db"
    _run(db, "add", "1")
    bad = tmp_path / "bad.json"
    bad.write_text("not json", encoding="utf-8")

    assert _run(db, "import", str(bad), "--merge", "replace") == 1
    assert "nothing was changed" in output.getvalue()
    with WatchlistStore(db) as store:
        assert store.get(1) is not None


def test_import_with_bad_entries_reports_failure(cli_env):
    tmp_path, output = cli_env
    db = tmp_path / "watch.db"
    snapshot = tmp_path / "snap.json"
    snapshot.write_text(
        json.dumps(
            {
                "format_version": "2.0",
                "entries": [
                    {"id": 1, "status": "watching"},
                    {"id": 2, "status": "watching", "score": 50},
                ],
            }
        ),
        encoding="utf-8",
    )

    assert _run(db, "import", str(snapshot)) == 1
    assert "Failed" in output.getvalue()
    with WatchlistStore(db) as store:
        assert [e.id for e in store.list()] == [1]


def test_database_path_from_environment(cli_env, monkeypatch):
    tmp_path, _ = cli_env
    env_db = tmp_path / "env.db"
    monkeypatch.setenv("ANITRACK_DB_PATH", str(env_db))

    assert main(["add", "7"]) == 0
    with WatchlistStore(env_db) as store:
        assert store.get(7) is not None


def test_unopenable_database(cli_env):
    tmp_path, _ = cli_env
    with patch("anitrack.cli.WatchlistStore", side_effect=StoreError("locked")):
        assert _run(tmp_path / "watch.db", "list") == 1
