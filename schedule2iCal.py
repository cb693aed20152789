#!/usr/bin/env python3
"""Timetable to iCalendar converter.

Loads a group's weekly timetable and recovery days (from the timetable API
or a bundled JSON file), resolves every date of the requested period for the
user's subgroup and writes an iCalendar (.ics) file, or prints the schedule.
"""

import argparse
import logging
import sys
from dataclasses import replace
from datetime import date

from timetable import (
    EngineConfig,
    JsonFileAssignmentStore,
    ScheduleResolver,
    SettingsStore,
    SourceUnavailableError,
    TimetableClient,
    TimetableDataError,
    load_bundle,
)
from timetable.parsing import parse_date, parse_subgroup
from transformer import ICalTransformer


def parse_date_arg(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return parse_date(date_str)
    except TimetableDataError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. Expected YYYY-MM-DD."
        )


def get_default_end_date() -> date:
    """Calculate default end date based on current month.

    Returns June 30 if current month is January-June,
    December 31 if current month is July-December.
    """
    today = date.today()

    if today.month < 7:
        return date(today.year, 6, 30)
    else:
        return date(today.year, 12, 31)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_schedule(resolver: ScheduleResolver, days: dict) -> None:
    """Print resolved days as a plain-text listing."""
    for day, items in days.items():
        week = "odd" if resolver.parity.is_odd_week(day) else "even"
        header = f"{day:%A %Y-%m-%d} ({week} week)"
        if items and items[0].is_recovery_projection:
            header += f" - recovery day, {items[0].replaced_weekday.name.title()} timetable"
            if items[0].recovery_reason:
                header += f": {items[0].recovery_reason}"
        print(header)

        if not items:
            print("  No classes")
        for item in items:
            line = f"  {item.start_time:%H:%M}-{item.end_time:%H:%M}  {item.subject_name}"
            details = ", ".join(part for part in (item.room_number, item.teacher_name) if part)
            if details:
                line += f"  [{details}]"
            if item.assignment_count:
                line += f"  ({item.assignment_count} due)"
            print(line)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Resolve a class timetable and export it to iCalendar format.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 schedule2iCal.py --group P-2422 --subgroup 2 --start-date 2025-09-01
  python3 schedule2iCal.py --data timetable.json --start-date 2025-09-01 --print
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--data",
        help="Bundled timetable JSON file with periods and recovery days"
    )
    source.add_argument(
        "--group",
        help="Name of the group to fetch from the timetable API"
    )
    source.add_argument(
        "--group-id",
        help="Id of the group to fetch from the timetable API"
    )

    parser.add_argument(
        "--subgroup",
        choices=["1", "2"],
        default=None,
        help="Subgroup to show split classes for (default: whole-group classes only)"
    )

    parser.add_argument(
        "--settings",
        default=None,
        help="Settings JSON file with the group selection and custom periods"
    )

    parser.add_argument(
        "--assignments",
        default=None,
        help="Assignments JSON file used to annotate classes with due work"
    )

    parser.add_argument(
        "--start-date",
        type=parse_date_arg,
        default=None,
        help="First date to resolve (format: YYYY-MM-DD, default: today)"
    )

    parser.add_argument(
        "--end-date",
        type=parse_date_arg,
        default=None,
        help="Last date to resolve (format: YYYY-MM-DD). "
             "Default: June 30 (spring semester) or December 31 (fall semester)"
    )

    parser.add_argument(
        "--epoch",
        type=parse_date_arg,
        default=None,
        help="Monday that starts the odd/even week count (default: TIMETABLE_EPOCH or 2025-09-01)"
    )

    parser.add_argument(
        "-o", "--output",
        default="schedule.ics",
        help="Output file path (default: schedule.ics)"
    )

    parser.add_argument(
        "-p", "--print",
        dest="print_only",
        action="store_true",
        help="Print the resolved schedule instead of writing a file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    # Ensure output file has .ics extension
    output_path = args.output
    if not output_path.lower().endswith(".ics"):
        output_path = f"{output_path}.ics"

    start_date = args.start_date or date.today()
    end_date = args.end_date if args.end_date else get_default_end_date()

    if start_date > end_date:
        print("Error: Start date must not be after end date.", file=sys.stderr)
        sys.exit(1)

    try:
        config = EngineConfig.from_env()
        if args.epoch:
            config = replace(config, epoch=args.epoch)

        store = SettingsStore(path=args.settings)
        settings = store.load()

        if args.data:
            data = load_bundle(args.data)
        else:
            client = TimetableClient(config)
            group_id = args.group_id or client.find_group_id(args.group)
            if not group_id:
                print(f"Error: Group '{args.group}' not found.", file=sys.stderr)
                sys.exit(1)
            print(f"Fetching timetable for group: {args.group or group_id}")
            data = client.fetch_timetable(group_id)
            settings = replace(settings, selected_group_id=group_id)

        if args.subgroup:
            settings = replace(settings, subgroup=parse_subgroup(args.subgroup))

        assignment_store = JsonFileAssignmentStore(args.assignments) if args.assignments else None
        resolver = ScheduleResolver.from_data(data, config.epoch, assignment_store)

        days = resolver.resolve_range(start_date, end_date, settings)

        if args.print_only:
            print_schedule(resolver, days)
            return

        print(f"Resolved {sum(len(items) for items in days.values())} classes on {len(days)} days.")

        if not days:
            print("Warning: No classes found. The output file will be empty.")

        transformer = ICalTransformer(timezone=config.timezone)
        transformer.transform(days)
        transformer.save(output_path)

        print(f"Schedule saved to: {output_path}")
        print(f"Period: {start_date} to {end_date}")

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)
    except SourceUnavailableError as e:
        print(f"Error: Timetable service unavailable: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
