#!/usr/bin/env python3
"""
FLEXR analytics CLI.

Training analytics over a JSON health export.

Usage:
    flexr sleep export.json --date 2024-03-10
    flexr zones export.json --max-hr 190
    flexr pace export.json
    flexr stations export.json
    flexr load export.json --target 8
    flexr readiness export.json --hrv 65 --resting-hr 52
    flexr ingest export.json --db flexr.db --user athlete-1
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .config import get_settings
from .exceptions import FlexrAnalyticsError
from .schemas import HealthExport, load_export
from .metrics.zones import ZONE_NAMES, classify_zones, zone_percentages, average_and_max
from .metrics.pace import (
    derive_splits,
    format_pace,
    pace_metrics,
    pace_zone_breakdown,
    predict_race_time,
)
from .analysis.sleep import weekly_report, summarize_week
from .analysis.readiness import calculate_readiness
from .analysis.load import weekly_load
from .analysis.stations import HYROX_STATION_ORDER, station_performance, time_distribution
from .db.database import WorkoutStore
from .ingestion import WorkoutIngestor

console = Console()


def get_zone_color(zone: str) -> str:
    """Get rich color for readiness zone."""
    colors = {
        "green": "green",
        "yellow": "yellow",
        "red": "red",
    }
    return colors.get(zone, "white")


def get_trend_color(trend: str) -> str:
    colors = {
        "improving": "green",
        "stable": "yellow",
        "declining": "red",
    }
    return colors.get(trend, "white")


def format_seconds(seconds: float) -> str:
    """Format seconds as M:SS or H:MM:SS."""
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def cmd_sleep(args, export: HealthExport):
    """Show the last seven nights of sleep."""
    tz = ZoneInfo(get_settings().timezone)
    reference = args.date or date.today()
    nights = weekly_report(export.sleep_samples(), reference, tz=tz)
    summary = summarize_week(nights)

    console.print()
    console.print(Panel(f"[bold]FLEXR - Sleep (week before {reference.isoformat()})[/bold]"))

    table = Table(box=box.ROUNDED)
    table.add_column("Night", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Deep", justify="right")
    table.add_column("REM", justify="right")
    table.add_column("Quality", justify="right")

    for night in nights:
        if night.total_hours == 0:
            table.add_row(night.night_date.isoformat(), "-", "-", "-", "-")
            continue
        quality_color = "green" if night.quality >= 80 else "yellow" if night.quality >= 60 else "red"
        table.add_row(
            night.night_date.isoformat(),
            f"{night.total_hours:.1f}h",
            f"{night.deep_hours:.1f}h ({night.deep_pct:.0f}%)",
            f"{night.rem_hours:.1f}h ({night.rem_pct:.0f}%)",
            Text(str(night.quality), style=quality_color),
        )

    console.print(table)
    status = "[green]optimal[/green]" if summary.is_optimal else "[yellow]outside 7-9h[/yellow]"
    console.print(
        f"Average: {summary.average_hours:.1f}h over {summary.nights_with_data} nights, "
        f"deep {summary.deep_percentage}% - {status}"
    )
    console.print()


def cmd_zones(args, export: HealthExport):
    """Show time in heart rate zones."""
    max_hr = args.max_hr if args.max_hr is not None else get_settings().default_max_hr
    samples = export.heart_rate_samples()
    durations = classify_zones(samples, max_hr, sample_duration=args.sample_seconds)
    percentages = zone_percentages(durations)
    avg_hr, peak_hr = average_and_max(samples)

    console.print()
    console.print(Panel(f"[bold]FLEXR - Heart Rate Zones (max HR {max_hr})[/bold]"))

    table = Table(box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("")

    for i, (seconds, pct) in enumerate(zip(durations.as_list(), percentages)):
        table.add_row(
            f"Z{i + 1} {ZONE_NAMES[i + 1]}",
            format_seconds(seconds),
            f"{pct}%",
            "#" * (pct // 5),
        )

    console.print(table)
    console.print(f"Average HR: {avg_hr:.0f} bpm, max HR: {peak_hr:.0f} bpm")
    console.print()


def cmd_pace(args, export: HealthExport):
    """Show splits and pace metrics for each workout."""
    workouts = export.workout_records()
    if not workouts:
        console.print("No workouts in export.")
        return

    for workout in workouts:
        splits = derive_splits(workout)
        avg_pace = workout.duration_seconds / workout.distance_km if workout.distance_km > 0 else None
        metrics = pace_metrics(splits, avg_pace=avg_pace)

        console.print()
        console.print(Panel(
            f"[bold]{workout.id}[/bold] - {workout.start.strftime('%Y-%m-%d %H:%M')} - "
            f"{workout.distance_km:.2f} km in {format_seconds(workout.duration_seconds)}"
        ))

        if not splits:
            console.print("No usable splits.")
            continue

        table = Table(box=box.SIMPLE)
        table.add_column("Km", justify="right", style="cyan")
        table.add_column("Time", justify="right")
        table.add_column("Pace", justify="right")
        for split in splits:
            table.add_row(str(split.km_index), format_seconds(split.duration_seconds), format_pace(split.pace_per_km))
        console.print(table)

        console.print(f"Fastest: {format_pace(metrics.fastest)}  Slowest: {format_pace(metrics.slowest)}")
        if metrics.consistency_percent is not None:
            console.print(f"Consistency (CV): {metrics.consistency_percent:.1f}%")
        if metrics.fade_factor_percent is not None:
            fade_color = "green" if metrics.fade_factor_percent <= 0 else "yellow"
            console.print(f"Fade: [{fade_color}]{metrics.fade_factor_percent:+.1f}%[/{fade_color}]")

        zones = [z for z in pace_zone_breakdown([s.pace_per_km for s in splits]) if z.percentage > 0]
        for zone in zones:
            console.print(f"  {zone.zone_name} {zone.pace_range}: {zone.percentage}%")

        if avg_pace:
            prediction = predict_race_time(avg_pace)
            console.print(
                f"HYROX estimate: {format_seconds(prediction.predicted_seconds)} "
                f"(+/- {prediction.margin_minutes:.0f} min)"
            )
    console.print()


def cmd_stations(args, export: HealthExport):
    """Show station performance and time distribution."""
    segments = export.segment_logs()
    performances = station_performance(segments, station_order=HYROX_STATION_ORDER)

    console.print()
    console.print(Panel("[bold]FLEXR - Station Performance[/bold]"))

    if not performances:
        console.print("No station segments in export.")
    else:
        table = Table(box=box.ROUNDED)
        table.add_column("Station", style="cyan")
        table.add_column("Best", justify="right")
        table.add_column("Average", justify="right")
        table.add_column("Last", justify="right")
        table.add_column("Attempts", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Trend")

        for p in performances:
            table.add_row(
                p.station_name,
                format_seconds(p.best_time),
                format_seconds(p.average_time),
                format_seconds(p.last_time),
                str(p.attempts),
                str(p.score),
                Text(p.trend.value, style=get_trend_color(p.trend.value)),
            )
        console.print(table)

    dist = time_distribution(segments)
    console.print(
        f"Time split: running {dist.running_pct:.0f}%, stations {dist.stations_pct:.0f}%, "
        f"transitions {dist.transitions_pct:.0f}%"
    )
    console.print()


def cmd_load(args, export: HealthExport):
    """Show the trailing seven days of training volume."""
    tz = ZoneInfo(get_settings().timezone)
    load = weekly_load(export.workout_records(), target_hours=args.target, today=args.date, tz=tz)

    console.print()
    console.print(Panel("[bold]FLEXR - Weekly Training Load[/bold]"))

    table = Table(box=box.ROUNDED)
    table.add_column("Day", style="cyan")
    table.add_column("Date")
    table.add_column("Hours", justify="right")

    for day in load.daily_breakdown:
        label = f"[bold]{day.day_label}[/bold]" if day.is_today else day.day_label
        table.add_row(label, day.day.isoformat(), f"{day.hours:.1f}")

    console.print(table)
    progress_color = "green" if load.progress_pct >= 100 else "yellow"
    console.print(
        f"{load.current_hours:.1f}h of {load.target_hours:.1f}h target "
        f"([{progress_color}]{load.progress_pct:.0f}%[/{progress_color}])"
    )
    console.print()


def cmd_readiness(args, export: HealthExport):
    """Show today's readiness from HRV, last night's sleep and resting HR."""
    tz = ZoneInfo(get_settings().timezone)
    reference = args.date or date.today()
    last_night = weekly_report(export.sleep_samples(), reference, tz=tz)[-1]

    fallback_hr = None
    if args.resting_hr is None:
        avg_hr, _ = average_and_max(export.heart_rate_samples())
        fallback_hr = avg_hr or None

    score = calculate_readiness(
        args.hrv,
        last_night.quality if last_night.total_hours > 0 else None,
        args.resting_hr,
        fallback_avg_hr=fallback_hr,
    )
    zone = score.zone
    color = get_zone_color(zone)

    console.print()
    console.print(Panel(f"[bold]Readiness: [{color}]{score.total}/100[/{color}][/bold]"))
    console.print(f"  HRV: +{score.hrv_score}")
    console.print(f"  Sleep: +{score.sleep_contribution}")
    console.print(f"  Resting HR: +{score.resting_hr_contribution}")
    console.print(f"[italic]{score.recommendation}[/italic]")
    console.print()


def cmd_ingest(args, export: HealthExport):
    """Ingest workouts into the store, skipping duplicates."""
    store = WorkoutStore(args.db or get_settings().db_path)
    ingestor = WorkoutIngestor(store)

    results = ingestor.ingest_many(args.user, export.workout_records())
    created = sum(1 for r in results if r.created)
    skipped = len(results) - created

    removed = ingestor.remove_duplicates(args.user) if args.dedupe else 0

    console.print()
    console.print(f"[green]Stored {created} workouts[/green], skipped {skipped} duplicates")
    if args.dedupe:
        console.print(f"Removed {removed} historic duplicates")
    console.print(f"Total for {args.user}: {store.count(args.user)}")
    console.print()


COMMANDS = {
    "sleep": cmd_sleep,
    "zones": cmd_zones,
    "pace": cmd_pace,
    "stations": cmd_stations,
    "load": cmd_load,
    "readiness": cmd_readiness,
    "ingest": cmd_ingest,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flexr",
        description="FLEXR - training analytics over a health export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  flexr sleep export.json --date 2024-03-10
  flexr zones export.json --max-hr 190
  flexr pace export.json
  flexr stations export.json
  flexr load export.json --target 8
  flexr readiness export.json --hrv 65 --resting-hr 52
  flexr ingest export.json --db flexr.db --user athlete-1
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_command(name: str, help_text: str) -> argparse.ArgumentParser:
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("export", help="Path to a JSON health export")
        return p

    sleep_p = add_command("sleep", "Show weekly sleep")
    sleep_p.add_argument("--date", type=parse_date, help="Reference date (default: today)")

    zones_p = add_command("zones", "Show heart rate zone distribution")
    zones_p.add_argument("--max-hr", type=int, help="Maximum heart rate (default from settings)")
    zones_p.add_argument(
        "--sample-seconds", type=float, default=None,
        help="Duration credited to zero-length samples",
    )

    add_command("pace", "Show splits and pace metrics per workout")
    add_command("stations", "Show station performance")

    load_p = add_command("load", "Show weekly training load")
    load_p.add_argument("--target", type=float, help="Weekly target hours (default from settings)")
    load_p.add_argument("--date", type=parse_date, help="Reference date (default: today)")

    readiness_p = add_command("readiness", "Show today's readiness score")
    readiness_p.add_argument("--hrv", type=float, help="Morning HRV in ms")
    readiness_p.add_argument("--resting-hr", type=int, help="Resting heart rate")
    readiness_p.add_argument("--date", type=parse_date, help="Reference date (default: today)")

    ingest_p = add_command("ingest", "Ingest workouts into the store")
    ingest_p.add_argument("--db", help="SQLite database path (default from settings)")
    ingest_p.add_argument("--user", required=True, help="User id")
    ingest_p.add_argument("--dedupe", action="store_true", help="Also remove historic duplicates")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        console.print(f"[red]Invalid settings: {problems}[/red]")
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return

    try:
        export = load_export(args.export)
        handler(args, export)
    except FileNotFoundError as e:
        console.print(f"[red]File not found: {e.filename}[/red]")
        sys.exit(1)
    except FlexrAnalyticsError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
