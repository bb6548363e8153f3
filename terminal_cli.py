#!/usr/bin/env python3
"""
WMS Terminal — Command Line
===========================
Headless front end over the sync core: list items and locations (served
from cache when offline), queue commits, inspect and drain the pending
queue, or run the background sync loop.

Run with: wms-terminal submit --location A1 --item 42 --quantity 3 --subtract
"""

import argparse
import sys
import threading
from datetime import datetime, timezone
from typing import Optional, Sequence

from config import get_settings
from core.context import TerminalContext, build_context
from core.exceptions import TerminalError
from logger import configure_logging, get_logger
from services.lookup_service import build_commit, item_names, resolve_location

logger = get_logger(__name__)


def _stale_note(ctx: TerminalContext, kind: str) -> str:
    captured = ctx.gateway.cached_at(kind)
    if captured is None:
        return ""
    when = datetime.fromtimestamp(captured, tz=timezone.utc).isoformat(timespec="seconds")
    return f"  (cache captured {when})"


def cmd_items(ctx: TerminalContext, args: argparse.Namespace) -> int:
    items = ctx.gateway.fetch_items()
    for item in items:
        print(f"{item.id}\t{item.name}")
    print(f"{len(items)} items{_stale_note(ctx, 'items')}")
    return 0


def cmd_locations(ctx: TerminalContext, args: argparse.Namespace) -> int:
    if args.code:
        match = resolve_location(ctx.gateway, args.code)
        if not match.found:
            print(f"New location '{match.code}'")
            return 0
        names = item_names(ctx.gateway)
        for item_id in match.item_ids:
            print(f"{item_id}\t{names.get(item_id, f'ID: {item_id}')}")
        return 0
    locations = ctx.gateway.fetch_locations()
    for loc in locations:
        print(f"{loc.name}\t{','.join(str(i) for i in loc.item_ids)}")
    print(f"{len(locations)} locations{_stale_note(ctx, 'locations')}")
    return 0


def cmd_check(ctx: TerminalContext, args: argparse.Namespace) -> int:
    ok = ctx.gateway.check_credentials()
    print("Credentials OK" if ok else "Invalid URL or API key")
    return 0 if ok else 1


def cmd_submit(ctx: TerminalContext, args: argparse.Namespace) -> int:
    mode = "SUB" if args.subtract else "ADD"
    try:
        commit = build_commit(ctx.device_id, args.location, args.quantity, args.item, mode)
    except ValueError as e:
        print(f"✗ {e}")
        return 1
    ctx.queue.submit(commit)
    print(f"Queued {commit.delta:+d} of item {commit.item_id} at {commit.location}")
    return 0


def cmd_pending(ctx: TerminalContext, args: argparse.Namespace) -> int:
    pending = ctx.queue.pending()
    for commit in pending:
        print(f"{commit.location}\t{commit.item_id}\t{commit.delta:+d}\t{commit.device_id}")
    print(f"{len(pending)} pending")
    return 0


def cmd_drain(ctx: TerminalContext, args: argparse.Namespace) -> int:
    if not args.force and not ctx.probe.is_reachable():
        print("Network unreachable; nothing sent")
        return 1
    sent = ctx.queue.process_queue()
    print(f"Sent {sent}, {ctx.queue.pending_count()} still pending")
    return 0


def cmd_run(ctx: TerminalContext, args: argparse.Namespace) -> int:
    ctx.start()
    print("Sync running; Ctrl-C to stop")
    idle = threading.Event()
    try:
        while not idle.wait(1.0):
            pass
    except KeyboardInterrupt:
        print("Stopping...")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wms-terminal",
        description="Offline-tolerant warehouse inventory terminal",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("items", help="List items").set_defaults(func=cmd_items)

    p = sub.add_parser("locations", help="List locations or resolve a scanned code")
    p.add_argument("code", nargs="?", help="Scanned location code")
    p.set_defaults(func=cmd_locations)

    sub.add_parser("check", help="Validate URL and API key").set_defaults(func=cmd_check)

    p = sub.add_parser("submit", help="Queue an inventory adjustment")
    p.add_argument("--location", required=True, help="Location code")
    p.add_argument("--item", type=int, required=True, help="Item id")
    p.add_argument("--quantity", type=int, required=True, help="Positive quantity")
    p.add_argument("--subtract", action="store_true", help="Remove instead of add")
    p.set_defaults(func=cmd_submit)

    sub.add_parser("pending", help="Show queued commits").set_defaults(func=cmd_pending)

    p = sub.add_parser("drain", help="Send queued commits now")
    p.add_argument("--force", action="store_true", help="Skip the reachability check")
    p.set_defaults(func=cmd_drain)

    sub.add_parser("run", help="Run the background sync loop").set_defaults(func=cmd_run)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level=settings.log.level,
        json_format=settings.log.format == "json",
    )
    try:
        with build_context(settings) as ctx:
            return args.func(ctx, args)
    except TerminalError as e:
        logger.error("Command failed", command=args.command, **e.to_dict())
        print(f"✗ {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
