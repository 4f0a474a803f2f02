"""AirRoute - route string expansion from the command line.

Loads navigation data, expands one route and prints the resulting fixes on
one line, followed by any errors, one per line. With --transitions it lists
the published transitions of a procedure instead.

Typical usage:
    airroute "KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD" --navdata data/navigation/sample.yaml
    python -m airroute.main "MTHEW.CHPPR1" --navdata nav.yaml --verbose
    airroute --transitions CHPPR1

Exit codes:
    0: Route expanded (possibly with errors)
    1: No waypoint could be produced, or the procedure has no transitions
    2: Configuration or navigation data could not be loaded
"""

import argparse
import logging
import sys
from pathlib import Path

from airroute.core.config import ConfigError, ConfigLoader, RouteSettings
from airroute.core.logging_system import LoggingError, get_logger, initialize_logging
from airroute.core.resource_path import get_config_path, get_data_path
from airroute.navigation.navdata import DataTables, NavDatabase, NavDataError
from airroute.route.engine import RouteEngine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_WAYPOINTS = 1
EXIT_LOAD_FAILURE = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list, defaults to ``sys.argv[1:]``

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="AirRoute - Route String Expansion",
        epilog="The expanded route is printed space-separated on one line, "
        "followed by one line per error.",
    )

    parser.add_argument(
        "route", type=str, nargs="?", help='Route string (e.g., "KALB PAYGE Q822 FNT")'
    )

    parser.add_argument(
        "--transitions",
        metavar="PROCEDURE",
        type=str,
        help="List the transitions of a DP or STAR instead of expanding a route",
    )

    parser.add_argument(
        "--navdata",
        type=Path,
        default=None,
        help="Navigation data file, YAML or CSV (default: data/navigation/sample.yaml)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Route settings YAML file, layered over config/airroute.yaml",
    )

    parser.add_argument(
        "--log-config",
        type=Path,
        default=None,
        help="Logging configuration YAML file (default: config/logging.yaml)",
    )

    parser.add_argument("--departure", type=str, help="Departure airport (e.g., KALB)")

    parser.add_argument("--destination", type=str, help="Destination airport (e.g., KORD)")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug output on the console",
    )

    args = parser.parse_args(argv)
    if not args.route and not args.transitions:
        parser.error("a route or --transitions is required")
    return args


def _setup_logging(args: argparse.Namespace) -> logging.Logger:
    console_level = "DEBUG" if args.verbose else None
    logging_config = args.log_config or get_config_path("logging.yaml")
    if args.log_config or logging_config.exists():
        initialize_logging(logging_config, use_platform_dir=True, console_level=console_level)
    else:
        initialize_logging(use_platform_dir=True, console_level=console_level)
    return get_logger(__name__)


def _load_settings(path: Path | None) -> RouteSettings:
    default_path = get_config_path("airroute.yaml")
    config = ConfigLoader.load(default_path) if default_path.exists() else ConfigLoader()
    if path is not None:
        config.merge(ConfigLoader.load(path))
    return RouteSettings.from_config(config)


def _load_navdata(path: Path | None) -> NavDatabase:
    path = path or get_data_path("navigation/sample.yaml")
    db = NavDatabase()
    if path.suffix.lower() == ".csv":
        db.load_points_from_csv(path)
    else:
        db.load_from_yaml(path)
    return db


def run(args: argparse.Namespace) -> int:
    """Expand the route, or list procedure transitions, as asked on the command line.

    Returns:
        Exit code
    """
    log = _setup_logging(args)

    try:
        settings = _load_settings(args.config)
        db = _load_navdata(args.navdata)
    except (ConfigError, NavDataError) as e:
        log.error("Failed to load: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    tables = db.snapshot()
    log.info("Navigation data: %s", tables.stats())

    if args.transitions:
        return _print_transitions(tables, args.transitions)

    engine = RouteEngine(tables, settings)
    result = engine.expand(args.route, departure=args.departure, destination=args.destination)

    print(result.expanded_string)
    for error in result.errors or []:
        print(error)

    if result.is_hard_failure:
        log.warning("No waypoints produced for route: %r", args.route)
        return EXIT_NO_WAYPOINTS
    return EXIT_OK


def _print_transitions(tables: DataTables, procedure: str) -> int:
    transitions = tables.procedure_transitions(procedure)
    for kind, name in transitions:
        print(f"{kind.value} {name}")

    if not transitions:
        logger.warning("No transitions found for procedure: %s", procedure)
        return EXIT_NO_WAYPOINTS
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    try:
        return run(parse_args(argv))
    except LoggingError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILURE
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return EXIT_NO_WAYPOINTS


if __name__ == "__main__":
    sys.exit(main())
