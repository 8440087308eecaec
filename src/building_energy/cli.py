"""Command-line interface for building energy insights."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import db
from .analysis import insights
from .buildings import get_building, list_buildings, load_buildings_from_yaml, register_building, save_buildings
from .collectors import csv_file, json_feed
from .models import Building, Recommendation, Savings
from .readings import get_readings

console = Console()

SEVERITY_STYLES = {1: "yellow", 2: "dark_orange", 3: "red"}


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date: {value} (expected YYYY-MM-DD)")


def _print_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _print_recommendations(recommendations: list[Recommendation]) -> None:
    if not recommendations:
        console.print("[green]No recommendations - no anomalies detected[/green]")
        return

    for rec in recommendations:
        console.print(f"\n[bold cyan]{rec.title}[/bold cyan] [dim]({rec.id})[/dim]")
        console.print(f"  {rec.description}")
        console.print(f"  [bold]Action:[/bold] {rec.action}")
        console.print(f"  [bold]Impact:[/bold] {rec.impact}")
        console.print(f"  [bold]Urgency:[/bold] {rec.urgency}")


def _print_savings(savings: Savings) -> None:
    console.print("\n[cyan]Potential savings:[/cyan]")
    console.print(f"  Energy: {savings.energy} kWh")
    console.print(f"  Cost: ${savings.cost:.2f}")
    console.print(f"  Carbon: {savings.carbon} kg CO2")


def _report_analysis(building_id: str, db_path: Path | None, as_json: bool = False) -> None:
    result = insights.analyze_building(building_id, db_path)

    if as_json:
        _print_json(
            {
                "readings": result["readings"],
                "anomalies_detected": result["anomalies_detected"],
                "recommendations": [asdict(r) for r in result["recommendations"]],
                "savings": asdict(result["savings"]),
            }
        )
        return

    console.print(
        f"[green]Analyzed {result['readings']} readings, "
        f"{result['anomalies_detected']} anomalies detected[/green]"
    )
    _print_recommendations(result["recommendations"])
    _print_savings(result["savings"])


@click.group()
@click.option("--db-path", type=click.Path(), help="Path to SQLite database")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: WARNING)",
)
@click.pass_context
def cli(ctx, db_path, log_level):
    """Building energy insights - detect anomalies and estimate savings."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path) if db_path else None


# Database commands
@cli.group()
def database():
    """Database management commands."""
    pass


@database.command("init")
@click.pass_context
def db_init(ctx):
    """Initialize the database schema."""
    db.init_db(ctx.obj["db_path"])
    console.print("[green]Database initialized successfully[/green]")


@database.command("stats")
@click.pass_context
def db_stats(ctx):
    """Show database statistics."""
    stats = db.get_stats(ctx.obj["db_path"])

    table = Table(title="Database Statistics")
    table.add_column("Category", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Range")

    table.add_row("Buildings", str(stats["buildings"]["count"]), "")

    readings = stats["readings"]
    table.add_row(
        "Readings",
        str(readings["count"]),
        f"{readings['earliest'] or 'N/A'} → {readings['latest'] or 'N/A'}",
    )
    for building_id, count in stats.get("readings_by_building", {}).items():
        table.add_row(f"  └ {building_id}", str(count), "")

    anomalies = stats["anomalies"]
    table.add_row("Anomalies", str(anomalies["count"]), "")
    for anomaly_type, count in anomalies["by_type"].items():
        table.add_row(f"  └ {anomaly_type}", str(count), "")

    console.print(table)


# Building commands
@cli.group()
def building():
    """Building registry commands."""
    pass


@building.command("add")
@click.argument("building_id")
@click.argument("name")
@click.option("--location", help="Building location")
@click.option("--area", type=float, help="Floor area in m²")
@click.pass_context
def building_add(ctx, building_id, name, location, area):
    """Register a building."""
    try:
        register_building(Building(id=building_id, name=name, location=location, area=area), ctx.obj["db_path"])
    except ValueError as e:
        _fail(str(e))
    console.print(f"[green]Building {building_id} registered successfully[/green]")


@building.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def building_list(ctx, as_json):
    """List registered buildings."""
    buildings = list_buildings(ctx.obj["db_path"])

    if as_json:
        _print_json([asdict(b) for b in buildings])
        return

    if not buildings:
        console.print("[yellow]No buildings registered[/yellow]")
        return

    table = Table(title="Buildings")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Location")
    table.add_column("Area (m²)", justify="right")
    table.add_column("Last Updated", style="dim")

    for b in buildings:
        table.add_row(
            b.id,
            b.name,
            b.location or "",
            f"{b.area:g}" if b.area is not None else "",
            b.last_updated.strftime("%Y-%m-%d %H:%M") if b.last_updated else "",
        )

    console.print(table)


@building.command("load")
@click.option("--config", type=click.Path(exists=True), help="Path to buildings.yaml")
@click.pass_context
def building_load(ctx, config):
    """Register buildings from YAML config."""
    config_path = Path(config) if config else None
    try:
        buildings = load_buildings_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
    count = save_buildings(buildings, ctx.obj["db_path"])
    console.print(f"[green]Loaded {count} building(s)[/green]")


# Import commands
@cli.group("import")
def import_cmd():
    """Import readings from various sources."""
    pass


@import_cmd.command("csv")
@click.argument("building_id")
@click.option("--file", "file_path", type=click.Path(exists=True), required=True, help="Path to readings CSV")
@click.option("--json", "as_json", is_flag=True, help="Output analysis as JSON")
@click.pass_context
def import_csv(ctx, building_id, file_path, as_json):
    """Import readings from CSV and analyze the building."""
    db_path = ctx.obj["db_path"]
    try:
        get_building(building_id, db_path)
        result = csv_file.import_from_csv(building_id, Path(file_path), db_path)
    except ValueError as e:
        _fail(str(e))

    if not as_json:
        console.print(f"[green]Imported {result['imported']} readings[/green]")
        if result["skipped"]:
            console.print(f"[yellow]Skipped {result['skipped']} duplicates[/yellow]")
    _report_analysis(building_id, db_path, as_json)


@import_cmd.command("feed")
@click.argument("building_id")
@click.option("--url", required=True, help="URL of the JSON readings feed")
@click.option("--token", help="Bearer token (or set ENERGY_FEED_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Output analysis as JSON")
@click.pass_context
def import_feed(ctx, building_id, url, token, as_json):
    """Import readings from a JSON feed and analyze the building."""
    db_path = ctx.obj["db_path"]
    try:
        get_building(building_id, db_path)
        if not as_json:
            console.print(f"[cyan]Fetching readings from {url}...[/cyan]")
        result = json_feed.import_from_feed(building_id, url, token, db_path)
    except httpx.TimeoutException:
        _fail("Request timed out")
    except ValueError as e:
        _fail(str(e))

    if not as_json:
        console.print(f"[green]Imported {result['imported']} readings[/green]")
        if result["skipped"]:
            console.print(f"[yellow]Skipped {result['skipped']} duplicates[/yellow]")
    _report_analysis(building_id, db_path, as_json)


# Analysis commands
@cli.command()
@click.argument("building_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def analyze(ctx, building_id, as_json):
    """Re-run anomaly detection for a building."""
    try:
        _report_analysis(building_id, ctx.obj["db_path"], as_json)
    except ValueError as e:
        _fail(str(e))


@cli.command()
@click.argument("building_id")
@click.option("--from-date", help="Start date (YYYY-MM-DD)")
@click.option("--to-date", help="End date (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def readings(ctx, building_id, from_date, to_date, as_json):
    """List a building's readings."""
    db_path = ctx.obj["db_path"]
    try:
        get_building(building_id, db_path)
    except ValueError as e:
        _fail(str(e))

    reading_list = get_readings(building_id, _parse_date(from_date), _parse_date(to_date), db_path)

    if as_json:
        _print_json([asdict(r) for r in reading_list])
        return

    if not reading_list:
        console.print("[yellow]No readings found[/yellow]")
        return

    table = Table(title=f"Readings for {building_id}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Consumption (kWh)", justify="right")
    table.add_column("Temperature", justify="right")
    table.add_column("Occupancy", justify="right")
    table.add_column("Day Type")

    for r in reading_list:
        table.add_row(
            r.timestamp.isoformat(),
            f"{r.consumption:.2f}",
            f"{r.temperature:.1f}",
            str(r.occupancy),
            r.day_type,
        )

    console.print(table)


@cli.command()
@click.argument("building_id")
@click.option("--severity", type=click.IntRange(1, 3), help="Minimum severity (1-3)")
@click.option("--from-date", help="Start date (YYYY-MM-DD)")
@click.option("--to-date", help="End date (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def anomalies(ctx, building_id, severity, from_date, to_date, as_json):
    """List a building's detected anomalies."""
    try:
        anomaly_list = insights.get_anomalies(
            building_id,
            min_severity=severity,
            start=_parse_date(from_date),
            end=_parse_date(to_date),
            db_path=ctx.obj["db_path"],
        )
    except ValueError as e:
        _fail(str(e))

    if as_json:
        _print_json([a.to_dict() for a in anomaly_list])
        return

    if not anomaly_list:
        console.print("[green]No anomalies found[/green]")
        return

    table = Table(title=f"Anomalies for {building_id}")
    table.add_column("Type", style="cyan")
    table.add_column("Timestamp")
    table.add_column("Consumption", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Increase", justify="right")
    table.add_column("Severity", justify="center")
    table.add_column("Description")

    for a in anomaly_list:
        style = SEVERITY_STYLES.get(a.severity, "white")
        table.add_row(
            a.type,
            a.timestamp.isoformat(),
            f"{a.consumption:.1f}",
            f"{a.expected:.1f}",
            f"{a.percentage_increase}%",
            f"[{style}]{a.severity}[/{style}]",
            a.description,
        )

    console.print(table)


@cli.command()
@click.argument("building_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def recommendations(ctx, building_id, as_json):
    """Show recommendations for a building's anomalies."""
    try:
        recs = insights.get_recommendations(building_id, ctx.obj["db_path"])
    except ValueError as e:
        _fail(str(e))

    if as_json:
        _print_json([asdict(r) for r in recs])
    else:
        _print_recommendations(recs)


@cli.command()
@click.argument("building_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def savings(ctx, building_id, as_json):
    """Show potential savings for a building."""
    try:
        result = insights.get_savings(building_id, ctx.obj["db_path"])
    except ValueError as e:
        _fail(str(e))

    if as_json:
        _print_json(asdict(result))
    else:
        _print_savings(result)


if __name__ == "__main__":
    cli()
