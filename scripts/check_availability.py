"""Command-line front end for the bus availability check."""

import argparse
import logging
import os
import sys

from buses.models import Period
from buses.store import InMemoryBusStore
from locations.errors import ResolutionError
from matching.availability import service_from_env
from matching.policy import policy_from_env

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_STOPS = os.path.join(BASE_DIR, "sampledata", "stops.csv")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_log_entry(entry) -> None:
    print(f"[availability-log] {entry.status.value} {entry.location} ({entry.lat},{entry.lng})")


def cmd_check(args: argparse.Namespace) -> int:
    setup_logging(args.verbose)
    store = InMemoryBusStore.from_csv(args.stops)
    service = service_from_env(store, policy=policy_from_env(), log_sink=print_log_entry)

    try:
        report = service.check_availability(args.location, radius_km=args.radius_km)
    except ResolutionError as e:
        print(
            f"Could not find location \"{args.location}\". "
            "Please provide coordinates as \"lat,lng\" or a valid location name.",
            file=sys.stderr,
        )
        logging.debug(f"Resolution failed: {e}")
        return 2

    print(f"\n{report.message}")
    where = f"{report.location.lat},{report.location.lng}"
    if report.place_name:
        where += f" ({report.place_name})"
    print(f"Location: {where}\n")

    for match in report.buses:
        runs = [name for name, hit in (("morning", match.morning_matched), ("evening", match.evening_matched)) if hit]
        note = ""
        if match.stop_only:
            note = " [stop check only]"
        elif match.degraded:
            note = " [straight-line path]"
        print(
            f"  Bus {match.bus.id} - {match.bus.name} ({match.bus.location}): "
            f"{', '.join(runs)} run, {match.nearby_stop_count} stop(s) nearby{note}"
        )
    return 0


def cmd_routes(args: argparse.Namespace) -> int:
    setup_logging(args.verbose)
    store = InMemoryBusStore.from_csv(args.stops)

    for bus in store.list_buses():
        print(f"Bus {bus.id} - {bus.name} ({bus.location})")
        for period in Period:
            summary = bus.route_summary(period)
            print(f"  {period.value.title()}: {summary.description}")
            for index, name in enumerate(summary.stop_names, start=1):
                print(f"    {index}. {name}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check which campus buses pass near a location",
    )
    parser.add_argument("--stops", default=DEFAULT_STOPS, help="Stops CSV (default: sampledata/stops.csv)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check bus availability near a location")
    check.add_argument("location", help='Place name or "lat,lng"')
    check.add_argument("--radius-km", type=float, default=None, help="Search radius (default: SEARCH_RADIUS_KM or 1.5)")
    check.set_defaults(func=cmd_check)

    routes = subparsers.add_parser("routes", help="List bus routes")
    routes.set_defaults(func=cmd_routes)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
