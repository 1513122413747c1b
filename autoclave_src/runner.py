#!/usr/bin/env python3
"""CLI entry point for checking an autoclave from the command line."""

import argparse
import logging
import sys
from datetime import datetime

from .classifier import map_runmode_to_type
from .client import AutoclaveClient
from .config import config
from .connection import check_autoclave_connection
from .duration import calculate_cycle_duration
from .exceptions import AutoclaveError
from .log_parser import parse_cycle_log
from .sync import CycleRange, fetch_cycles_for_range, get_cycles_since, get_latest_cycle

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else config.get_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def print_cycles(cycles) -> None:
    """Print flattened cycles one per line."""
    for cycle in cycles:
        print(f"  {cycle.year}-{cycle.month}-{cycle.day}  #{cycle.cycle_number}")
    print(f"\nTotal cycles: {len(cycles)}")


def show_cycle(client: AutoclaveClient, date_str: str, cycle_number: str, serial: str | None) -> int:
    """Fetch one cycle and print its parsed log."""
    try:
        cycle_date = datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        print(f"Invalid --date {date_str!r}, expected YYYY-MM-DD")
        return 2

    telemetry = client.fetch_cycle_data(
        f"{cycle_date.year:04d}",
        f"{cycle_date.month:02d}",
        f"{cycle_date.day:02d}",
        cycle_number,
        serial_number=serial,
    )
    if telemetry is None:
        print(f"Cycle {cycle_number} not found on {client.base_url}")
        return 1

    parsed = parse_cycle_log(telemetry.log)
    duration = calculate_cycle_duration(telemetry)
    cycle_type = map_runmode_to_type(telemetry.runmode, telemetry.status)

    print("=" * 60)
    print(f"Cycle {telemetry.number} ({telemetry.date})")
    print("=" * 60)
    print(f"  Status:    {telemetry.status}")
    print(f"  Succeeded: {telemetry.succeeded}")
    print(f"  Type:      {cycle_type.value}")
    estimate = " (estimate)" if duration.is_estimate else ""
    print(f"  Duration:  {duration.minutes} min{estimate}")
    if parsed:
        print(f"  Model:     {parsed.model}")
        print(f"  Serial:    {parsed.serial_number or '-'}")
        print(f"  Program:   {parsed.cycle_program or '-'}")
        if parsed.target_temp is not None:
            print(f"  Target:    {parsed.target_temp} C / {parsed.target_time} min")
        if parsed.cycle_datetime:
            print(f"  Started:   {parsed.cycle_datetime:%Y-%m-%d %H:%M:%S}")
    else:
        print("  Log could not be parsed")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Autoclave integration - query a STATCLAVE G4 compatible unit"
    )

    parser.add_argument("--host", required=True, help="Autoclave IP address")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Autoclave HTTP port (default: {config.DEFAULT_PORT})",
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--test", action="store_true", help="Test the connection")
    action.add_argument("--latest", action="store_true", help="Show the latest cycle")
    action.add_argument(
        "--since",
        type=int,
        metavar="N",
        help="List cycles numbered above N",
    )
    action.add_argument(
        "--range",
        choices=[r.value for r in CycleRange],
        help="List cycles in a date window",
    )
    action.add_argument("--cycle", type=str, metavar="N", help="Show one cycle")

    parser.add_argument("--date", type=str, help="Cycle date for --cycle (YYYY-MM-DD)")
    parser.add_argument("--serial", type=str, default=None, help="Unit serial number for --cycle")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.cycle and not args.date:
        parser.error("--cycle requires --date")

    client = AutoclaveClient(args.host, args.port)

    if args.test:
        result = check_autoclave_connection(client)
        if result.success:
            print(f"Connected to {client.base_url}: {result.model}")
            return 0
        print(f"Connection to {client.base_url} failed: {result.error}")
        return 1

    try:
        if args.latest:
            latest = get_latest_cycle(client)
            if latest is None:
                print("No cycles found")
                return 1
            print_cycles([latest])
        elif args.since is not None:
            print_cycles(get_cycles_since(client, args.since))
        elif args.range:
            print_cycles(fetch_cycles_for_range(client, args.range))
        else:
            return show_cycle(client, args.date, args.cycle, args.serial)
    except AutoclaveError as e:
        logger.error(f"Autoclave request failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
