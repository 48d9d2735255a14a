#!/usr/bin/env python3
"""
Unified CLI for vehicle fuel logging.

Commands:
  init      - Create a new vehicle file
  summary   - Show totals, averages and best/worst MPG
  history   - View fill-ups with per-fill statistics
  log       - Add a fill-up (any two of price, gallons, cost)
  edit      - Change a fill-up
  delete    - Remove a fill-up
  export    - Write fill-ups as CSV
  import    - Read fill-ups from CSV
  validate  - Check the vehicle file against the schema
  template  - Print a sample CSV for importing
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from fueling import (
    Classification,
    EntryForm,
    Field,
    FuelingRecord,
    Summary,
    Vehicle,
    decode,
    encode,
    end_of_day,
    load_vehicle,
    save_record,
    save_vehicle,
    validate,
)
from fueling.codec import TEMPLATE, MalformedRow, parse_date
from fueling.loader import create_vehicle, delete_record, update_record
from fueling.schema import check_vehicle_file

# =============================================================================
# Formatting helpers
# =============================================================================


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_cost(cost: Optional[float], places: int = 2) -> str:
    """Format cost for display."""
    return f"${cost:,.{places}f}" if cost is not None else "-"


def format_mpg(mpg: Optional[float]) -> str:
    """Format MPG; zero means no measurement for that fill-up."""
    if mpg is None or mpg <= 0:
        return "-"
    return f"{mpg:.1f}"


def format_optional(value: Optional[float], fmt: str = "{:.1f}") -> str:
    """Format a statistic that may be undefined."""
    return fmt.format(value) if value is not None else "n/a"


def format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d")


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_cli_date(value: str) -> datetime:
    """argparse type for dates in any importable format."""
    try:
        return parse_date(value)
    except MalformedRow as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_cli_until(value: str) -> datetime:
    """argparse type for an inclusive end date; a bare date covers the whole day."""
    when = parse_cli_date(value)
    if "T" not in value.upper():
        when = end_of_day(when)
    return when


def parse_month(value: str) -> datetime:
    """argparse type for YYYY-MM."""
    try:
        return datetime.strptime(value, "%Y-%m").replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM, got {value!r}") from None


# =============================================================================
# Tables
# =============================================================================


def make_history_table(records: List[FuelingRecord]) -> List[List[str]]:
    """Convert records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                format_date(record.date),
                format_miles(record.odometer),
                format_miles(record.miles_driven) if record.miles_driven else "-",
                f"{record.gallons:.2f}",
                format_cost(record.price_per_gallon, places=3),
                format_cost(record.total_cost),
                format_mpg(record.mpg),
                format_cost(record.cost_per_mile, places=3)
                if record.cost_per_mile
                else "-",
                record.classification.value,
                truncate(record.notes),
                record.id[:8],
            ]
        )
    return rows


def make_summary_table(summary: Summary) -> List[List[str]]:
    """Convert a summary to label/value rows."""
    return [
        ["Fill-ups", str(summary.count)],
        ["Total cost", format_cost(summary.total_cost)],
        ["Total miles", format_miles(summary.total_miles)],
        ["Total gallons", f"{summary.total_gallons:,.2f}"],
        ["Average MPG", format_mpg(summary.average_mpg)],
        ["Best MPG", format_optional(summary.best_mpg)],
        ["Worst MPG", format_optional(summary.worst_mpg)],
        ["Cost per mile", format_cost(summary.average_cost_per_mile, places=3)],
        ["Average price", format_cost(summary.average_price_per_gallon, places=3)],
        ["Highest price", format_optional(summary.highest_price, "${:.3f}")],
        ["Lowest price", format_optional(summary.lowest_price, "${:.3f}")],
        [
            "Last fill-up",
            format_date(summary.most_recent.date) if summary.most_recent else "n/a",
        ],
    ]


def find_record(vehicle: Vehicle, prefix: str) -> Optional[FuelingRecord]:
    """Find a record by id or unique id prefix."""
    matches = [r for r in vehicle.records if r.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def resolve_classification(args) -> Classification:
    if getattr(args, "missed", False):
        return Classification.MISSED
    if getattr(args, "partial", False):
        return Classification.PARTIAL
    return Classification.FULL


# =============================================================================
# Commands
# =============================================================================


def cmd_init(args):
    """Create a new vehicle file."""
    vehicle = Vehicle(args.name, args.make, args.model, args.year)
    try:
        create_vehicle(args.vehicle_file, vehicle)
    except FileExistsError:
        print(f"Error: File already exists: {args.vehicle_file}")
        return 1
    print(f"Created {vehicle.display_name} in {args.vehicle_file}")
    return 0


def cmd_summary(args):
    """Show totals, averages and extremes."""
    vehicle = load_vehicle(args.vehicle_file)

    if args.month:
        summary = vehicle.summary_for_month(args.month)
        period = args.month.strftime("%B %Y")
    else:
        summary = vehicle.summary(args.since, args.until)
        period = "all time"
        if args.since or args.until:
            since = format_date(args.since) if args.since else "start"
            until = format_date(args.until) if args.until else "now"
            period = f"{since} to {until}"

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Period: {period}")
    print()

    if summary.is_empty:
        print("No fill-ups found.")
        return 0

    print(tabulate(make_summary_table(summary), tablefmt="simple"))
    return 0


def cmd_history(args):
    """View fill-ups with per-fill statistics."""
    vehicle = load_vehicle(args.vehicle_file)
    records = vehicle.get_records_sorted(reverse=not args.asc)
    if args.since:
        records = [r for r in records if r.date >= args.since]

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Total fill-ups: {len(vehicle.records)}")
    if args.since:
        print(f"Showing: {len(records)} (filtered)")
    print()

    if not records:
        print("No fill-ups found.")
        return 0

    headers = [
        "Date",
        "Odometer",
        "Miles",
        "Gallons",
        "Price",
        "Cost",
        "MPG",
        "$/mi",
        "Fill",
        "Notes",
        "Id",
    ]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


def cmd_log(args):
    """Add a fill-up, solving whichever of price/gallons/cost was left out."""
    vehicle = load_vehicle(args.vehicle_file)

    form = EntryForm()
    for field, value in (
        (Field.PRICE_PER_GALLON, args.price),
        (Field.GALLONS, args.gallons),
        (Field.TOTAL_COST, args.cost),
    ):
        if value is not None:
            form.set_field(field, value)

    try:
        record = form.to_record(
            date=args.date or datetime.now(timezone.utc),
            odometer=args.odometer,
            classification=resolve_classification(args),
            notes=args.notes,
        )
    except ValueError as e:
        print(f"Error: {e}")
        print("Give any two of --price, --gallons and --cost.")
        return 1

    vehicle.add_record(record)

    print(f"Adding fill-up to {args.vehicle_file}:")
    print(f"  Date:     {format_date(record.date)}")
    print(f"  Odometer: {format_miles(record.odometer)}")
    print(f"  Price:    {format_cost(record.price_per_gallon, places=3)}")
    print(f"  Gallons:  {record.gallons:.2f}")
    print(f"  Cost:     {format_cost(record.total_cost)}")
    if form.last_solution:
        print(f"  (calculated {form.last_solution.field.value.replace('_', ' ')})")
    if record.miles_driven:
        print(f"  Miles:    {format_miles(record.miles_driven)}")
    if record.mpg:
        print(f"  MPG:      {format_mpg(record.mpg)}")
    if record.notes:
        print(f"  Notes:    {record.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_record(args.vehicle_file, record)
    print("Fill-up saved.")
    return 0


def cmd_edit(args):
    """Change fields of a fill-up."""
    vehicle = load_vehicle(args.vehicle_file)
    record = find_record(vehicle, args.record_id)
    if record is None:
        print(f"Error: No unique fill-up matches '{args.record_id}'")
        return 1

    changes = {}
    if args.date is not None:
        changes["date"] = args.date
    if args.odometer is not None:
        changes["odometer"] = args.odometer
    if args.price is not None:
        changes["price_per_gallon"] = args.price
    if args.gallons is not None:
        changes["gallons"] = args.gallons
    if args.cost is not None:
        changes["total_cost"] = args.cost
    if args.fill is not None:
        changes["classification"] = Classification(args.fill)
    if args.notes is not None:
        changes["notes"] = args.notes or None

    if not changes:
        print("Nothing to change.")
        return 0

    vehicle.update_record(record.id, **changes)
    update_record(args.vehicle_file, record)
    print(f"Updated fill-up {record.id[:8]}.")
    return 0


def cmd_delete(args):
    """Remove a fill-up."""
    vehicle = load_vehicle(args.vehicle_file)
    record = find_record(vehicle, args.record_id)
    if record is None:
        print(f"Error: No unique fill-up matches '{args.record_id}'")
        return 1

    print(
        f"Deleting fill-up from {format_date(record.date)} "
        f"@ {format_miles(record.odometer)} mi"
    )
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    delete_record(args.vehicle_file, record.id)
    print("Fill-up deleted.")
    return 0


def cmd_export(args):
    """Write fill-ups as CSV."""
    vehicle = load_vehicle(args.vehicle_file)
    text = encode(vehicle.records)
    if args.output:
        args.output.write_text(text)
        print(f"Exported {len(vehicle.records)} fill-ups to {args.output}")
    else:
        sys.stdout.write(text)
    return 0


def cmd_import(args):
    """Read fill-ups from CSV."""
    text = args.csv_file.read_text()
    result = validate(text)
    if not result:
        print(f"Error: {result.message}")
        return 1

    records = decode(text)
    vehicle = load_vehicle(args.vehicle_file)
    before = len(vehicle.records)
    vehicle.add_records(records)

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Importing {len(records)} fill-ups ({before} already logged)")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_vehicle(args.vehicle_file, vehicle)
    print("Import saved.")
    return 0


def cmd_validate(args):
    """Check the vehicle file's structure and record consistency."""
    errors = check_vehicle_file(args.vehicle_file)
    if errors:
        print(f"FAIL: {args.vehicle_file.name}")
        for error in errors:
            print(f"  {error}")
        return 1
    print(f"OK: {args.vehicle_file.name}")
    return 0


def cmd_template(args):
    """Print a sample CSV for importing."""
    sys.stdout.write(TEMPLATE)
    return 0


# =============================================================================
# Main
# =============================================================================


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("FUEL_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle fuel log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s vehicles/wrx.yaml init --name "Daily" --make Subaru --model WRX --year 2012
  %(prog)s vehicles/wrx.yaml log --odometer 12500 --price 3.459 --gallons 10.5
  %(prog)s vehicles/wrx.yaml log --odometer 12800 --gallons 11.2 --cost 38.07 --partial
  %(prog)s vehicles/wrx.yaml history --since 2024-01-01
  %(prog)s vehicles/wrx.yaml summary --month 2024-01
  %(prog)s vehicles/wrx.yaml export --output wrx.csv
  %(prog)s vehicles/wrx.yaml validate
  %(prog)s vehicles/wrx.yaml import old-log.csv --dry-run
""",
    )
    parser.add_argument(
        "vehicle_file",
        type=Path,
        help="Path to vehicle YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output (or set FUEL_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Init subcommand
    init_parser = subparsers.add_parser("init", help="Create a new vehicle file")
    init_parser.add_argument("--name", required=True, help="Display name")
    init_parser.add_argument("--make", type=str)
    init_parser.add_argument("--model", type=str)
    init_parser.add_argument("--year", type=int)

    # Summary subcommand
    summary_parser = subparsers.add_parser(
        "summary", help="Show totals, averages and best/worst MPG"
    )
    period = summary_parser.add_mutually_exclusive_group()
    period.add_argument(
        "--month",
        type=parse_month,
        help="Limit to a calendar month (YYYY-MM)",
    )
    period.add_argument(
        "--since",
        type=parse_cli_date,
        help="Only fill-ups on or after this date",
    )
    summary_parser.add_argument(
        "--until",
        type=parse_cli_until,
        help="Only fill-ups on or before this date",
    )

    # History subcommand
    history_parser = subparsers.add_parser("history", help="View fill-ups")
    history_parser.add_argument(
        "--since",
        type=parse_cli_date,
        help="Show only fill-ups since date (YYYY-MM-DD)",
    )
    history_parser.add_argument(
        "--asc",
        action="store_true",
        help="Oldest first instead of newest first",
    )

    # Log subcommand
    log_parser = subparsers.add_parser("log", help="Add a fill-up")
    log_parser.add_argument(
        "--odometer", type=float, required=True, help="Odometer reading"
    )
    log_parser.add_argument(
        "--date",
        type=parse_cli_date,
        help="Fill-up date (default: now)",
    )
    log_parser.add_argument("--price", type=float, help="Price per gallon")
    log_parser.add_argument("--gallons", type=float, help="Gallons pumped")
    log_parser.add_argument("--cost", type=float, help="Total cost")
    fill = log_parser.add_mutually_exclusive_group()
    fill.add_argument(
        "--partial",
        action="store_true",
        help="Tank wasn't filled (excluded from MPG)",
    )
    fill.add_argument(
        "--missed",
        action="store_true",
        help="A previous fill-up wasn't logged (no miles counted)",
    )
    log_parser.add_argument("--notes", type=str, help="Notes about the fill-up")
    log_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # Edit subcommand
    edit_parser = subparsers.add_parser("edit", help="Change a fill-up")
    edit_parser.add_argument("record_id", help="Fill-up id (or unique prefix)")
    edit_parser.add_argument("--date", type=parse_cli_date)
    edit_parser.add_argument("--odometer", type=float)
    edit_parser.add_argument("--price", type=float)
    edit_parser.add_argument("--gallons", type=float)
    edit_parser.add_argument("--cost", type=float)
    edit_parser.add_argument(
        "--fill", choices=[c.value for c in Classification], help="Fill type"
    )
    edit_parser.add_argument("--notes", type=str, help="New notes ('' to clear)")

    # Delete subcommand
    delete_parser = subparsers.add_parser("delete", help="Remove a fill-up")
    delete_parser.add_argument("record_id", help="Fill-up id (or unique prefix)")
    delete_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without saving",
    )

    # Export subcommand
    export_parser = subparsers.add_parser("export", help="Write fill-ups as CSV")
    export_parser.add_argument(
        "--output", type=Path, help="Output file (default: stdout)"
    )

    # Import subcommand
    import_parser = subparsers.add_parser("import", help="Read fill-ups from CSV")
    import_parser.add_argument("csv_file", type=Path, help="CSV file to import")
    import_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be imported without saving",
    )

    # Validate subcommand
    subparsers.add_parser(
        "validate", help="Check the vehicle file against the schema"
    )

    # Template subcommand
    subparsers.add_parser("template", help="Print a sample CSV for importing")

    return parser


COMMANDS = {
    "init": cmd_init,
    "summary": cmd_summary,
    "history": cmd_history,
    "log": cmd_log,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "export": cmd_export,
    "import": cmd_import,
    "validate": cmd_validate,
    "template": cmd_template,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    # Validate vehicle file exists
    if args.command not in ("init", "template") and not args.vehicle_file.exists():
        print(f"Error: File not found: {args.vehicle_file}")
        return 1
    if args.command == "import" and not args.csv_file.exists():
        print(f"Error: File not found: {args.csv_file}")
        return 1

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
