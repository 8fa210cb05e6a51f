"""Command line interface for browsing lines, stations and live arrivals."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import aiohttp

from now_departing.adapters.config import AppConfig
from now_departing.adapters.state import ClockState, NearbyState
from now_departing.domain.errors import ArrivalError, CatalogUnavailableError
from now_departing.domain.models import Coordinate, Direction, Selection
from now_departing.main import Services, build_services, configure_logging

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def show_lines(services: Services, format_json: bool = False) -> None:
    lines = services.line_directory.all_lines()
    if format_json:
        _print_json(
            [
                {
                    "id": line.id,
                    "color": line.styling.background_hex,
                    "text_color": line.styling.foreground,
                    "north": services.line_directory.destination_for(line.id, Direction.NORTH),
                    "south": services.line_directory.destination_for(line.id, Direction.SOUTH),
                }
                for line in lines
            ]
        )
        return
    for line in lines:
        north = services.line_directory.terminal_for(line.id, Direction.NORTH)
        south = services.line_directory.terminal_for(line.id, Direction.SOUTH)
        print(f"  {line.id:>2}  {north} <-> {south}")


async def show_stations(
    services: Services, line_id: str, probe: bool = False, format_json: bool = False
) -> None:
    catalog = services.catalog
    await catalog.load()
    await catalog.refresh_if_stale()
    if probe:
        await catalog.refresh_availability(line_id)

    stations = catalog.stations_for(line_id)
    if stations is None:
        print(f"Unknown line '{line_id}'", file=sys.stderr)
        sys.exit(1)

    if format_json:
        _print_json(
            [
                {
                    "id": s.id,
                    "name": s.canonical_name,
                    "display": s.display_name,
                    "has_known_service": s.has_known_service,
                }
                for s in stations
            ]
        )
        return

    print(f"\nLine {line_id}: {len(stations)} station(s)\n")
    for station in stations:
        marker = {True: "*", False: "x", None: " "}[station.has_known_service]
        print(f"  {marker} {station.display_name} ({station.canonical_name})")
    if probe:
        print("\n  * = trains currently reported, x = no trains reported")


def _clock_lines(services: Services, state: ClockState) -> list[str]:
    if not state.countdowns:
        return [state.message or state.status.value]
    return [services.formatter.format_countdown(c) for c in state.countdowns]


async def show_times(
    services: Services,
    line_id: str,
    station_query: str,
    direction: Direction,
    watch_seconds: int = 0,
    format_json: bool = False,
) -> None:
    try:
        await services.catalog.load()
    except CatalogUnavailableError as e:
        logger.warning(f"{e}")

    station = services.catalog.resolve_station(station_query, line_id)
    selection = Selection(
        line_id=line_id,
        station_name=station.canonical_name if station else station_query,
        direction=direction,
        station_display=station.display_name if station else station_query,
    )

    clock = services.new_clock(selection)
    await clock.start(selection)
    try:
        await clock.refresh()
        state = await clock.tick()
        if format_json:
            _print_json(
                {
                    "line": line_id,
                    "station": selection.station_name,
                    "direction": direction.value,
                    "status": state.status.value,
                    "message": state.message,
                    "arrivals": [
                        {
                            "time": c.record.arrival_instant.isoformat(),
                            "seconds": c.total_seconds,
                            "text": services.formatter.format_countdown(c),
                        }
                        for c in state.countdowns
                    ],
                }
            )
            return

        destination = services.line_directory.destination_for(line_id, direction)
        print(f"\n{line_id} to {destination} at {selection.display_name}\n")
        print("  " + ", ".join(_clock_lines(services, state)))
        for _ in range(watch_seconds):
            await asyncio.sleep(services.config.display_tick_seconds)
            print("  " + ", ".join(_clock_lines(services, clock.state)))
    finally:
        await clock.stop()


def _nearby_to_dict(services: Services, state: NearbyState) -> dict[str, Any]:
    return {
        "status": state.status.value,
        "message": state.message,
        "stations": [
            {
                "id": group.station_id,
                "name": group.station_display_name,
                "distance": services.formatter.format_distance(group.distance_meters),
                "lines": [
                    {
                        "line": sub.line_id,
                        "direction": sub.direction.value,
                        "destination": sub.destination_label,
                        "arrivals": [a.arrival_instant.isoformat() for a in sub.arrivals],
                    }
                    for sub in group.groups
                ],
            }
            for group in state.groups
        ],
    }


async def show_nearby(
    services: Services, latitude: float, longitude: float, format_json: bool = False
) -> None:
    aggregator = services.new_nearby_aggregator()
    state = await aggregator.aggregate_once(Coordinate(latitude, longitude))

    if format_json:
        _print_json(_nearby_to_dict(services, state))
        return

    if not state.groups:
        print(state.message or "No trains found", file=sys.stderr)
        return

    now = services.time_source.now()
    for group in state.groups:
        distance = services.formatter.format_distance(group.distance_meters)
        print(f"\n{group.station_display_name} ({distance})")
        for sub in group.groups:
            minutes = [
                str(max(0, int((a.arrival_instant - now).total_seconds() // 60)))
                for a in sub.arrivals
            ]
            print(f"  {sub.line_id} {sub.destination_label}: {', '.join(minutes)} min")


def manage_favorites(services: Services, args: argparse.Namespace) -> None:
    favorites = services.favorites_service
    if args.action == "list":
        items = favorites.get_all()
        if args.json:
            _print_json(
                [
                    {
                        "line_id": f.line_id,
                        "station_name": f.station_name,
                        "station_display": f.station_display,
                        "direction": f.direction.value,
                    }
                    for f in items
                ]
            )
        elif not items:
            print("No favorites yet.")
        else:
            for f in items:
                print(f"  {f.line_id} {f.direction.value} {f.display_name}")
        return

    station = services.catalog.resolve_station(args.station, args.line)
    selection = Selection(
        line_id=args.line,
        station_name=station.canonical_name if station else args.station,
        direction=Direction.parse(args.direction),
        station_display=station.display_name if station else args.station,
    )
    if args.action == "add":
        added = favorites.add(selection)
        print("Added." if added else "Already a favorite.")
    else:
        removed = favorites.remove(selection)
        print("Removed." if removed else "Not a favorite.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Real-time subway arrivals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  now-departing lines
  now-departing stations 1 --probe
  now-departing times 1 "Times Sq-42 St" N --watch 30
  now-departing nearby 40.7557 -73.9870
  now-departing favorites add 1 "Times Sq-42 St" N
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    lines_parser = subparsers.add_parser("lines", help="List known subway lines")
    lines_parser.add_argument("--json", action="store_true", help="Output as JSON")

    stations_parser = subparsers.add_parser("stations", help="List stations of a line")
    stations_parser.add_argument("line", help="Line id, e.g. 1 or A")
    stations_parser.add_argument(
        "--probe", action="store_true", help="Check which stations currently have trains"
    )
    stations_parser.add_argument("--json", action="store_true", help="Output as JSON")

    times_parser = subparsers.add_parser("times", help="Show arrivals for a station")
    times_parser.add_argument("line", help="Line id")
    times_parser.add_argument("station", help="Station name (as listed by 'stations')")
    times_parser.add_argument("direction", help="N or S")
    times_parser.add_argument(
        "--watch", type=int, default=0, metavar="SECONDS", help="Keep counting down"
    )
    times_parser.add_argument("--json", action="store_true", help="Output as JSON")

    nearby_parser = subparsers.add_parser("nearby", help="Show arrivals near a coordinate")
    nearby_parser.add_argument("latitude", type=float)
    nearby_parser.add_argument("longitude", type=float)
    nearby_parser.add_argument("--json", action="store_true", help="Output as JSON")

    favorites_parser = subparsers.add_parser("favorites", help="Manage favorites")
    favorites_sub = favorites_parser.add_subparsers(dest="action", required=True)
    favorites_list = favorites_sub.add_parser("list", help="List favorites")
    favorites_list.add_argument("--json", action="store_true", help="Output as JSON")
    for action in ("add", "remove"):
        action_parser = favorites_sub.add_parser(action, help=f"{action.capitalize()} a favorite")
        action_parser.add_argument("line")
        action_parser.add_argument("station")
        action_parser.add_argument("direction", help="N or S")

    return parser


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig().apply_toml_overrides()
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        async with aiohttp.ClientSession() as session:
            services = build_services(config, session)

            if args.command == "lines":
                show_lines(services, format_json=args.json)

            elif args.command == "stations":
                await show_stations(services, args.line, probe=args.probe, format_json=args.json)

            elif args.command == "times":
                await show_times(
                    services,
                    args.line,
                    args.station,
                    Direction.parse(args.direction),
                    watch_seconds=args.watch,
                    format_json=args.json,
                )

            elif args.command == "nearby":
                await show_nearby(services, args.latitude, args.longitude, format_json=args.json)

            elif args.command == "favorites":
                if args.action != "list":
                    try:
                        await services.catalog.load()
                    except CatalogUnavailableError as e:
                        logger.warning(f"{e}")
                manage_favorites(services, args)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except (ArrivalError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
