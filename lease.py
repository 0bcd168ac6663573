#!/usr/bin/env python3
"""
Unified CLI for lease mileage tracking.

Commands:
  status   - Show budget status and projections
  history  - View odometer readings
  log      - Add an odometer reading
  trip     - Record a trip by distance
  edit     - Change an existing reading
  delete   - Remove a reading
  lease    - Show or change the lease terms
  monthly  - Month-by-month budget breakdown
  weekly   - Usage for one week against the recommended rate
  chart    - Print the chart series as a table
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from tabulate import tabulate

from tracker import (
    CalculatedStats,
    ChartData,
    MileageReading,
    MonthlyStats,
    TrackerError,
    TripInput,
    YamlStore,
    convert_trip,
    service,
)
from tracker.errors import StoreUnavailable
from tracker.formatters import (
    format_cost,
    format_kilometers,
    format_mileage,
    format_percent,
    parse_swedish_number,
    truncate,
)
from tracker.timeutil import is_reading_in_future, utcnow

# =============================================================================
# Table helpers
# =============================================================================


def make_readings_table(readings: List[MileageReading], now) -> List[List[str]]:
    """Convert readings to table rows."""
    rows = []
    for reading in readings:
        kind = "trip" if reading.is_trip else "manual"
        if is_reading_in_future(reading.date, reading.time, now):
            kind += " (preliminary)"
        rows.append(
            [
                reading.id,
                reading.date,
                reading.time or "-",
                format_mileage(reading.mileage),
                kind,
                truncate(reading.display_note),
            ]
        )
    return rows


def make_monthly_table(months: List[MonthlyStats]) -> List[List[str]]:
    """Convert monthly stats to table rows."""
    rows = []
    for month in months:
        rows.append(
            [
                f"{month.month} {month.year}",
                format_mileage(month.budget),
                format_mileage(month.actual),
                format_mileage(month.variance),
                "projected" if month.is_projected else "",
            ]
        )
    return rows


def make_chart_table(chart: ChartData) -> List[List[str]]:
    """One row per axis point with every series side by side."""
    rows = []
    series = zip(
        chart.dates,
        chart.actual_data,
        chart.preliminary_data,
        chart.optimal_data,
        chart.trend_data,
        chart.projected_data,
    )
    for index, (day, actual, preliminary, optimal, trend, projected) in enumerate(series):
        marks = []
        if index == chart.current_date_index:
            marks.append("today")
        if index == chart.selected_date_index:
            marks.append("selected")
        if index == chart.zero_crossing_index:
            marks.append("limit reached")
        if index == chart.year1_crossing_index:
            marks.append("15 000 km")
        if index == chart.year2_crossing_index:
            marks.append("30 000 km")
        rows.append(
            [
                day,
                format_mileage(actual),
                format_mileage(preliminary),
                format_mileage(optimal),
                format_mileage(trend),
                format_mileage(projected),
                ", ".join(marks),
            ]
        )
    return rows


def print_status(stats: CalculatedStats) -> None:
    print(f"Reference date:   {stats.reference_date}")
    print(f"Current mileage:  {format_kilometers(stats.current_mileage)}")
    print(f"Budgeted so far:  {format_kilometers(stats.budgeted_mileage)}")
    print(f"Used:             {format_percent(stats.percentage_used)} "
          f"(optimal {format_percent(stats.optimal_percentage)})")
    print(f"Days:             {stats.days_elapsed} elapsed, {stats.days_remaining} remaining "
          f"of {stats.total_days}")
    print(f"Daily budget:     {format_kilometers(stats.daily_budget)}/day")
    print(f"Current rate:     {format_kilometers(stats.current_rate)}/day")
    print(f"Available rate:   {format_kilometers(stats.remaining_daily_budget)}/day")
    print(f"Projected total:  {format_kilometers(stats.projected_total)}")
    print()
    if stats.is_on_track:
        print(f"ON TRACK: {format_kilometers(stats.variance)} under budget")
    else:
        print(f"OVER BUDGET: {format_kilometers(-stats.variance)} over budget")
        print(f"  Pause driving for {stats.days_to_optimal} days to get back on the optimal line")
    if stats.projected_overage_cost:
        print(f"Projected overage: {format_kilometers(stats.projected_overage_km)} "
              f"({format_cost(stats.projected_overage_cost)})")


# =============================================================================
# Commands
# =============================================================================


def cmd_status(args, store, now):
    """Show budget status and projections."""
    stats = service.compute_stats(store, now, args.date)
    print_status(stats)
    return 0


def cmd_history(args, store, now):
    """View odometer readings."""
    readings = service.list_readings(store, now)
    if args.trips_only:
        readings = [r for r in readings if r.is_trip]
    if args.since:
        readings = [r for r in readings if r.date >= args.since]
    if not args.asc:
        readings = list(reversed(readings))

    if not readings:
        print("No readings found.")
        return 0

    headers = ["ID", "Date", "Time", "Odometer", "Kind", "Note"]
    print(tabulate(make_readings_table(readings, now), headers=headers, tablefmt="simple"))
    return 0


def cmd_log(args, store, now):
    """Add an odometer reading."""
    print(f"Adding reading: {args.date} {args.time or ''} {format_kilometers(args.mileage)}")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    reading = service.add_reading(store, args.date, args.mileage, now, time=args.time, note=args.note)
    print(f"Reading saved (id {reading.id}).")
    return 0


def cmd_trip(args, store, now):
    """Record a trip by distance."""
    trip = TripInput(args.distance, args.start, args.end, args.note)
    if args.dry_run:
        created = convert_trip(trip, service.list_readings(store, now), now)
    else:
        created = service.add_trip(store, trip, now)
    headers = ["ID", "Date", "Time", "Odometer", "Kind", "Note"]
    print(tabulate(make_readings_table(created, now), headers=headers, tablefmt="simple"))
    if args.dry_run:
        print("(dry run - no changes made)")
    return 0


def cmd_edit(args, store, now):
    """Change an existing reading."""
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    reading = service.update_reading(
        store, args.id, args.date, args.mileage, now, time=args.time, note=args.note
    )
    print(f"Updated reading {reading.id}: {reading.date} {format_kilometers(reading.mileage)}")
    return 0


def cmd_delete(args, store, now):
    """Remove a reading."""
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    service.delete_reading(store, args.id, now)
    print(f"Deleted reading {args.id}.")
    return 0


def cmd_lease(args, store, now):
    """Show or change the lease terms."""
    changes = {}
    if args.start:
        changes["startDate"] = args.start
    if args.end:
        changes["endDate"] = args.end
    if args.total_limit is not None:
        changes["totalLimit"] = args.total_limit
    if args.annual_limit is not None:
        changes["annualLimit"] = args.annual_limit
    if args.overage_cost is not None:
        changes["overageCostPerKm"] = args.overage_cost

    if changes and not args.dry_run:
        lease = service.update_lease(store, changes, now)
    else:
        lease = service.get_lease(store, now)

    print(f"Lease:         {lease.start_date} .. {lease.end_date} ({lease.total_days} days)")
    print(f"Total limit:   {format_kilometers(lease.total_limit)}")
    if lease.annual_limit is not None:
        print(f"Annual limit:  {format_kilometers(lease.annual_limit)}")
    if lease.overage_cost_per_km is not None:
        print(f"Overage cost:  {format_cost(lease.overage_cost_per_km)} per km")
    if changes and args.dry_run:
        print("(dry run - no changes made)")
    return 0


def cmd_monthly(args, store, now):
    """Month-by-month budget breakdown."""
    stats = service.compute_stats(store, now)
    headers = ["Month", "Budget", "Actual", "Variance", ""]
    print(tabulate(make_monthly_table(stats.monthly_stats), headers=headers, tablefmt="simple"))
    return 0


def cmd_weekly(args, store, now):
    """Usage for one week against the recommended rate."""
    week = service.compute_weekly_stats(store, now, args.date)
    print(f"Week:            {week.week_start} .. {week.week_end}"
          f"{' (current)' if week.is_current_week else ''}")
    print(f"Weekly budget:   {format_kilometers(week.weekly_budget)}")
    print(f"Used this week:  {format_kilometers(week.used_this_week)}")
    print(f"Remaining:       {format_kilometers(week.remaining_this_week)}")
    if week.is_current_week:
        print(f"Projected:       {format_kilometers(week.projected_weekly_usage)} "
              f"after {week.days_into_week} day(s)")
    print("ON TRACK" if week.is_on_track else "OVER BUDGET")
    return 0


def cmd_chart(args, store, now):
    """Print the chart series as a table."""
    chart = service.compute_chart_series(
        store, now, args.date, not args.no_preliminary, args.view
    )
    headers = ["Date", "Actual", "Preliminary", "Optimal", "Trend", "Recommended", ""]
    print(tabulate(make_chart_table(chart), headers=headers, tablefmt="simple"))
    if chart.zero_crossing_date:
        print(f"\nAt the current rate the allowance runs out on {chart.zero_crossing_date}")
    return 0


COMMANDS = {
    "status": cmd_status,
    "history": cmd_history,
    "log": cmd_log,
    "trip": cmd_trip,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "lease": cmd_lease,
    "monthly": cmd_monthly,
    "weekly": cmd_weekly,
    "chart": cmd_chart,
}

# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lease mileage tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/lease.yaml status
  %(prog)s data/lease.yaml status --date 2026-01-01
  %(prog)s data/lease.yaml history --since 2025-09-01
  %(prog)s data/lease.yaml log 2025-10-01 "5 230" --time 08:15
  %(prog)s data/lease.yaml trip 45 --note "Work"
  %(prog)s data/lease.yaml lease --total-limit 45000 --overage-cost 1.5
  %(prog)s data/lease.yaml chart --view year1
""",
    )
    parser.add_argument("data_file", type=Path, help="Path to lease YAML data file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser("status", help="Show budget status and projections")
    status_parser.add_argument("--date", type=str, help="Reference date YYYY-MM-DD (default: today)")

    history_parser = subparsers.add_parser("history", help="View odometer readings")
    history_parser.add_argument("--since", type=str, help="Show only readings since date (YYYY-MM-DD)")
    history_parser.add_argument("--trips-only", action="store_true", help="Only trip-generated readings")
    history_parser.add_argument("--asc", action="store_true", help="Oldest first")

    log_parser = subparsers.add_parser("log", help="Add an odometer reading")
    log_parser.add_argument("date", type=str, help="Reading date YYYY-MM-DD")
    log_parser.add_argument("mileage", type=parse_swedish_number, help="Odometer value in km")
    log_parser.add_argument("--time", type=str, help="Time of day HH:MM")
    log_parser.add_argument("--note", type=str, help="Free text note")
    log_parser.add_argument("--dry-run", action="store_true", help="Show what would be added without saving")

    trip_parser = subparsers.add_parser("trip", help="Record a trip by distance")
    trip_parser.add_argument("distance", type=parse_swedish_number, help="Trip distance in km (1-2000)")
    trip_parser.add_argument("--start", type=str, help="Start time, ISO 8601")
    trip_parser.add_argument("--end", type=str, help="End time, ISO 8601")
    trip_parser.add_argument("--note", type=str, help="Trip note (max 200 characters)")
    trip_parser.add_argument("--dry-run", action="store_true", help="Show the readings without saving")

    edit_parser = subparsers.add_parser("edit", help="Change an existing reading")
    edit_parser.add_argument("id", type=str, help="Reading ID (see history)")
    edit_parser.add_argument("date", type=str, help="Reading date YYYY-MM-DD")
    edit_parser.add_argument("mileage", type=parse_swedish_number, help="Odometer value in km")
    edit_parser.add_argument("--time", type=str, help="Time of day HH:MM")
    edit_parser.add_argument("--note", type=str, help="Free text note")
    edit_parser.add_argument("--dry-run", action="store_true", help="Save nothing")

    delete_parser = subparsers.add_parser("delete", help="Remove a reading")
    delete_parser.add_argument("id", type=str, help="Reading ID (see history)")
    delete_parser.add_argument("--dry-run", action="store_true", help="Save nothing")

    lease_parser = subparsers.add_parser("lease", help="Show or change the lease terms")
    lease_parser.add_argument("--start", type=str, help="Lease start date YYYY-MM-DD")
    lease_parser.add_argument("--end", type=str, help="Lease end date YYYY-MM-DD")
    lease_parser.add_argument("--total-limit", type=parse_swedish_number, help="Total km allowed")
    lease_parser.add_argument("--annual-limit", type=parse_swedish_number, help="Annual km allowance (display only)")
    lease_parser.add_argument("--overage-cost", type=parse_swedish_number, help="Cost per km over the limit")
    lease_parser.add_argument("--dry-run", action="store_true", help="Show current terms without saving")

    subparsers.add_parser("monthly", help="Month-by-month budget breakdown")

    weekly_parser = subparsers.add_parser("weekly", help="Usage for one week")
    weekly_parser.add_argument("--date", type=str, help="Any date in the week (default: today)")

    chart_parser = subparsers.add_parser("chart", help="Print chart series")
    chart_parser.add_argument("--date", type=str, help="Selected reference date YYYY-MM-DD")
    chart_parser.add_argument(
        "--view", choices=["total", "year1", "year2", "year3"], default="total", help="Window (default: total)"
    )
    chart_parser.add_argument("--no-preliminary", action="store_true", help="Ignore readings dated after today")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = YamlStore(args.data_file)
    now = utcnow()
    try:
        return COMMANDS[args.command](args, store, now)
    except TrackerError as e:
        field = f" ({e.field})" if e.field else ""
        print(f"Error{field}: {e.message}")
        return 1
    except StoreUnavailable as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
