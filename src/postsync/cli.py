"""CLI entry point for postsync."""

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict, fields

from rich.console import Console
from rich.table import Table

import postsync.io.logging_setup
import postsync.io.settings
from postsync.app.session import Session
from postsync.core.query import DerivedView, SortDirection, SortKey
from postsync.core.records import Record
from postsync.io.settings import ClientConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="postsync", description="Browse a remote record collection")
    parser.add_argument("--base-url", type=str, default=None, help="Collection endpoint URL")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="Search, filter, sort and page through records")
    ls.add_argument("--search", type=str, default="", help="Case-insensitive title substring")
    ls.add_argument("--owner", type=int, default=None, help="Only records of this owner id")
    ls.add_argument(
        "--sort",
        choices=[k.value for k in SortKey],
        default=SortKey.ID.value,
        help="Sort key (default: id)",
    )
    ls.add_argument("--desc", action="store_true", help="Sort descending")
    ls.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    ls.add_argument("--page-size", type=int, default=None, help="Records per page")

    show = sub.add_parser("show", help="Show one record")
    show.add_argument("id", type=int)

    cfg = sub.add_parser("config", help="Show or change saved settings")
    cfg_sub = cfg.add_subparsers(dest="action", required=True)
    cfg_sub.add_parser("show", help="Print the resolved configuration")
    cfg_set = cfg_sub.add_parser("set", help="Save one setting to the settings file")
    cfg_set.add_argument("key", choices=[f.name for f in fields(ClientConfig)])
    cfg_set.add_argument("value")
    return parser


def render_view(view: DerivedView, page: int) -> Table:
    table = Table(caption=f"page {page}/{view.total_pages} ({view.filtered_count} matching)")
    table.add_column("id", justify="right")
    table.add_column("owner", justify="right")
    table.add_column("title")
    for record in view.items:
        table.add_row(str(record.id), str(record.owner_id), record.title)
    return table


def render_record(record: Record) -> Table:
    table = Table(show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("id", str(record.id))
    table.add_row("owner", str(record.owner_id))
    table.add_row("title", record.title)
    table.add_row("body", record.body)
    return table


async def _list(session: Session, args, console: Console) -> int:
    result = await session.fetch_all()
    if not result.success:
        console.print(f"[red]error:[/red] {result.error}")
        return 1
    session.set_search(args.search)
    session.set_owner_filter(args.owner)
    direction = SortDirection.DESCENDING if args.desc else SortDirection.ASCENDING
    session.set_sort(args.sort, direction)
    page = session.set_page(args.page)
    console.print(render_view(session.view, page))
    return 0


async def _show(session: Session, args, console: Console) -> int:
    result = await session.fetch_by_id(args.id)
    if not result.success:
        console.print(f"[red]error:[/red] {result.error}")
        return 1
    console.print(render_record(result.data))
    return 0


def render_config(config: ClientConfig) -> Table:
    table = Table(caption=str(postsync.io.settings.get_config_path()))
    table.add_column("setting", style="bold")
    table.add_column("value")
    for key, value in asdict(config).items():
        table.add_row(key, str(value))
    return table


def _config(config: ClientConfig, args, console: Console) -> int:
    if args.action == "show":
        console.print(render_config(config))
        return 0
    try:
        value = postsync.io.settings.save_setting(args.key, args.value)
    except ValueError as e:
        console.print(f"[red]error:[/red] {e}")
        return 1
    console.print(f"{args.key} = {value!r}")
    return 0


_COMMANDS = {"list": _list, "show": _show}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    runtime = postsync.io.logging_setup.configure(args.command, verbose=args.verbose)
    logger.debug("log file: %s", runtime.file_path)

    config = postsync.io.settings.load_config({
        "base_url": args.base_url,
        "timeout": args.timeout,
        "page_size": getattr(args, "page_size", None),
    })
    console = Console()
    if args.command == "config":
        return _config(config, args, console)

    session = Session.from_config(config)
    try:
        return asyncio.run(_COMMANDS[args.command](session, args, console))
    finally:
        session.dispose()


if __name__ == "__main__":
    sys.exit(main())
