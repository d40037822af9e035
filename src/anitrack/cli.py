"""
Anitrack CLI - entry point

Parses the command line, loads configuration, opens the watchlist store and
dispatches to the command handlers.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from anitrack import __version__
from anitrack.commands import sync as sync_commands
from anitrack.commands import watchlist as watchlist_commands
from anitrack.context import AppContext
from anitrack.core.config import Config, ensure_directories, load_config
from anitrack.core.console import print_error
from anitrack.core.output import setup_loguru
from anitrack.domain.sync import ConflictResolution, MergeStrategy
from anitrack.domain.watchlist import MAX_SCORE, Entry, Status, WatchlistStore
from anitrack.exceptions import StoreError

SCOPE_CHOICES = ["all"] + Status.values()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anitrack",
        description="Anitrack - track your watchlist and move it between devices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: ./config.toml or ~/.config/anitrack/config.toml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Path to the watchlist database (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List watchlist entries")
    list_parser.add_argument("--status", choices=Status.values(), help="Only this status")

    show_parser = subparsers.add_parser("show", help="Show one entry")
    show_parser.add_argument("id", type=int, help="Catalog id")

    add_parser = subparsers.add_parser("add", help="Add or update an entry")
    add_parser.add_argument("id", type=int, help="Catalog id")
    add_parser.add_argument("--status", choices=Status.values(), default=Status.PLANNED.value)
    add_parser.add_argument("--score", type=int, default=0, help=f"0-{MAX_SCORE}, 0 = unrated")
    add_parser.add_argument("--progress", type=int, default=0, help="Episodes watched")
    add_parser.add_argument("--notes", default="")
    add_parser.add_argument("--favorite", action="store_true")
    add_parser.add_argument("--start-date", help="YYYY-MM-DD")
    add_parser.add_argument("--end-date", help="YYYY-MM-DD")
    add_parser.add_argument("--title", default="")
    add_parser.add_argument("--image", default="", help="Cover image URL or path")

    remove_parser = subparsers.add_parser("remove", help="Remove an entry")
    remove_parser.add_argument("id", type=int, help="Catalog id")

    search_parser = subparsers.add_parser("search", help="Search entries by title")
    search_parser.add_argument("query", nargs="+")

    subparsers.add_parser("stats", help="Show watchlist statistics")

    export_parser = subparsers.add_parser("export", help="Export a snapshot file")
    export_parser.add_argument("--scope", choices=SCOPE_CHOICES)
    export_parser.add_argument("-o", "--output", type=Path, help="Output file")

    import_parser = subparsers.add_parser("import", help="Import a snapshot file")
    import_parser.add_argument("path", type=Path)
    import_parser.add_argument(
        "--merge",
        choices=[s.value for s in MergeStrategy],
        help="merge (default), replace the whole list, or skip existing ids",
    )
    import_parser.add_argument(
        "--conflict",
        choices=[r.value for r in ConflictResolution],
        help="How merge treats ids already in the list",
    )
    import_parser.add_argument("--scope", choices=SCOPE_CHOICES)

    return parser


def dispatch(ctx: AppContext, args: argparse.Namespace) -> int:
    """Run the handler for a parsed subcommand and return its exit code."""
    if args.subcommand == "list":
        return watchlist_commands.handle_list_command(ctx, args.status)

    elif args.subcommand == "show":
        return watchlist_commands.handle_show_command(ctx, args.id)

    elif args.subcommand == "add":
        entry = Entry(
            id=args.id,
            status=args.status,
            score=args.score,
            progress=args.progress,
            notes=args.notes,
            favorite=args.favorite,
            start_date=args.start_date,
            end_date=args.end_date,
            title=args.title,
            image_reference=args.image,
        )
        return watchlist_commands.handle_add_command(ctx, entry)

    elif args.subcommand == "remove":
        return watchlist_commands.handle_remove_command(ctx, args.id)

    elif args.subcommand == "search":
        return watchlist_commands.handle_search_command(ctx, " ".join(args.query))

    elif args.subcommand == "stats":
        return watchlist_commands.handle_stats_command(ctx)

    elif args.subcommand == "export":
        return sync_commands.handle_export_command(ctx, args.scope, args.output)

    elif args.subcommand == "import":
        return sync_commands.handle_import_command(
            ctx, args.path, args.merge, args.conflict, args.scope
        )

    return 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the anitrack command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        return 0

    config: Config = load_config(args.config)
    ensure_directories()

    setup_loguru(
        config.log_file(),
        level=config.logging.level,
        console_output=config.logging.console_output,
    )

    try:
        store = WatchlistStore(args.db) if args.db else None
        ctx = AppContext.create(config, store=store)
    except StoreError as e:
        print_error(str(e))
        return 1

    try:
        return dispatch(ctx, args)
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())
