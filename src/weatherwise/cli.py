"""Command-line front end.

Examples::

    weatherwise                      # last location, or London
    weatherwise search "Paris"
    weatherwise locate 48.85 2.35
    weatherwise units fahrenheit
    weatherwise --offline show       # cached data only
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .cache import CacheStore
from .client import RequestCoordinator
from .engine import WeatherEngine
from .geolocation import StaticGeolocationProvider
from .models import Coordinates
from .presentation import ConsolePresenter
from .storage import JsonFileStore
from .types import DEFAULT_TIMEOUT_SECONDS, Outcome, Units

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path.home() / ".cache" / "weatherwise" / "storage.json"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("weatherwise", description="Weather lookup with offline cache")
    parser.add_argument("--storage", type=Path, default=DEFAULT_STORAGE_PATH)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS, help="HTTP timeout in seconds (default: none)")
    parser.add_argument("--offline", action="store_true", help="Show cached data only, without touching the network")
    parser.add_argument("--verbose", action="store_true")

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("show", help="Weather for the last location")
    search = commands.add_parser("search", help="Search a place by name")
    search.add_argument("query")
    locate = commands.add_parser("locate", help="Weather for a device position")
    locate.add_argument("latitude", type=float)
    locate.add_argument("longitude", type=float)
    commands.add_parser("retry", help="Fetch the last location again")
    commands.add_parser("favorite", help="Toggle the last location as a favorite")
    commands.add_parser("favorites", help="List favorites")
    commands.add_parser("recent", help="List recent searches")
    clear = commands.add_parser("clear", help="Clear cached data and lists")
    clear.add_argument("--units", action="store_true", help="Also forget the units preference")
    units = commands.add_parser("units", help="Set the temperature units")
    units.add_argument("units", choices=[u.value for u in Units])
    commands.add_parser("status", help="Show cache status")

    args = parser.parse_args(argv)
    if args.offline and args.command in ("search", "locate", "retry"):
        parser.error(f"--offline shows cached data only; it cannot be combined with {args.command}")
    return args


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _run_local(args: argparse.Namespace, cache: CacheStore) -> int:
    if args.command == "status":
        print(cache.cache_status())
    elif args.command == "recent":
        for item in cache.recent_searches():
            print(item.display_name)
    elif args.command == "favorites":
        for item in cache.favorites():
            print(item.display_name)
    elif args.command == "favorite":
        location = cache.last_location()
        if location is None:
            print("Nothing to add: no location has been shown yet")
            return 1
        added = cache.toggle_favorite(location)
        print(f"{location.display_name} {'added to' if added else 'removed from'} favorites")
    elif args.command == "clear" and args.units:
        if not cache.clear_all(keep_units=False):
            print("Failed to clear cache. Please try again.")
            return 1
        print("Cache cleared.")
    return 0


async def _run(args: argparse.Namespace) -> int:
    cache = CacheStore(JsonFileStore(args.storage))
    if args.command in ("status", "recent", "favorites", "favorite") or (
        args.command == "clear" and args.units
    ):
        return _run_local(args, cache)

    geolocation = None
    if args.command == "locate":
        geolocation = StaticGeolocationProvider(
            Coordinates(latitude=args.latitude, longitude=args.longitude)
        )

    presenter = ConsolePresenter(
        last_updated=cache.last_updated, favorite_check=cache.is_favorite
    )
    async with RequestCoordinator(timeout=args.timeout) as coordinator:
        engine = WeatherEngine(cache, coordinator, presenter, geolocation)

        if args.command == "clear":
            return 0 if engine.clear_cache() else 1
        if args.command == "units":
            engine.change_units(Units(args.units))
            print(f"Units set to {args.units}")
            return 0

        if args.offline:
            # Cached data only: replay the online-to-offline transition.
            outcome = engine.set_online(False)
        elif args.command == "search":
            outcome = await engine.search(args.query)
        elif args.command == "locate":
            outcome = await engine.use_my_location()
        elif args.command == "retry":
            outcome = await engine.retry()
        else:
            outcome = await engine.start()

    logger.debug(f"Outcome: {outcome.value}")
    return 1 if outcome is Outcome.BLOCKING_ERROR else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    return asyncio.run(_run(args))
