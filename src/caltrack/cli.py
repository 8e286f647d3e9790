"""Command-line entry point.

Usage:
    caltrack [-v] users
    caltrack lookup <barcode>
    caltrack add-meal --name NAME --calories N --carbs N --fat N --protein N
    caltrack scan [--add]
"""

import argparse
import asyncio
import sys
from collections.abc import Callable, Sequence

from caltrack.app_logging import configure_logging
from caltrack.config import Settings
from caltrack.containers import AppContainer, build_container
from caltrack.domain.loading import LoadFailed
from caltrack.rendering import format_draft, render_pipeline, render_store
from caltrack.services.ingestion import IngestionState
from caltrack.services.lookup import LookupFound, LookupNotFound


async def cmd_users(container: AppContainer, args: argparse.Namespace) -> int:
    """Fetch users and print progress for the current one."""
    state = await container.store.fetch_users()
    print(render_store(container.store))
    return 1 if isinstance(state, LoadFailed) else 0


async def cmd_lookup(container: AppContainer, args: argparse.Namespace) -> int:
    """Look up a barcode and print the resulting draft."""
    result = await container.lookup_service.lookup(args.barcode)
    if isinstance(result, LookupFound):
        print(format_draft(result.draft))
        return 0
    if isinstance(result, LookupNotFound):
        print(f"No product found for barcode {result.barcode}")
        return 1
    print(f"Error: {result.reason}")
    return 1


async def cmd_add_meal(container: AppContainer, args: argparse.Namespace) -> int:
    """Enter a meal manually and commit it."""
    user_id = args.user_id or await _resolve_user_id(container)
    if user_id is None:
        print(render_store(container.store))
        return 1
    pipeline = container.pipeline
    pipeline.start_manual_entry()
    pipeline.update_draft(
        name=args.name,
        calories=args.calories,
        carbs=args.carbs,
        fat=args.fat,
        protein=args.protein,
    )
    state = await pipeline.confirm(user_id)
    print(render_pipeline(pipeline))
    if state is not IngestionState.IDLE or pipeline.error:
        return 1
    print(render_store(container.store))
    return 0


async def cmd_scan(container: AppContainer, args: argparse.Namespace) -> int:
    """Scan a barcode from standard input and optionally log it."""
    pipeline = container.pipeline
    print("Scan a barcode (or type it and press Enter)...")
    await pipeline.scan(container.scanner.activate())
    print(render_pipeline(pipeline))
    if pipeline.state is not IngestionState.DRAFTING:
        return 1
    if not args.add:
        pipeline.cancel()
        return 0
    user_id = args.user_id or await _resolve_user_id(container)
    if user_id is None:
        pipeline.cancel()
        print(render_store(container.store))
        return 1
    state = await pipeline.confirm(user_id)
    print(render_pipeline(pipeline))
    return 0 if state is IngestionState.IDLE and not pipeline.error else 1


async def _resolve_user_id(container: AppContainer) -> str | None:
    await container.store.fetch_users()
    user = container.store.current_user
    return user.id if user is not None else None


COMMANDS = {
    "users": cmd_users,
    "lookup": cmd_lookup,
    "add-meal": cmd_add_meal,
    "scan": cmd_scan,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="caltrack", description="Track daily calories and macros."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("users", help="Show daily progress and logged meals")

    lookup_parser = subparsers.add_parser("lookup", help="Look up a barcode")
    lookup_parser.add_argument("barcode", help="EAN-8, EAN-13 or UPC-E barcode")

    add_parser = subparsers.add_parser("add-meal", help="Log a meal manually")
    add_parser.add_argument("--user-id", help="Backend user id (default: first user)")
    add_parser.add_argument("--name", required=True)
    for name in ("calories", "carbs", "fat", "protein"):
        add_parser.add_argument(f"--{name}", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan a barcode from stdin")
    scan_parser.add_argument(
        "--add", action="store_true", help="Log the scanned product unedited"
    )
    scan_parser.add_argument("--user-id", help="Backend user id (default: first user)")
    return parser


async def _run(
    args: argparse.Namespace, container_factory: Callable[[], AppContainer]
) -> int:
    container = container_factory()
    try:
        return await COMMANDS[args.command](container, args)
    finally:
        await container.close_resources()


def main(
    argv: Sequence[str] | None = None,
    container_factory: Callable[[], AppContainer] = build_container,
) -> int:
    """Run the caltrack CLI."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else Settings().log_level)
    return asyncio.run(_run(args, container_factory))


if __name__ == "__main__":
    sys.exit(main())
