#!/usr/bin/env python3
"""
Command-line interface for the character attribution engine.
"""

import json
import sys
import click
import logging
from datetime import datetime, timezone
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.logging import RichHandler

from .config.loader import load_and_apply_config
from .config.settings import get_settings
from .exceptions import AttributionError
from .parser.parser import EventLogParser
from .segmentation.aggregation import CharacterAggregation, build_character_aggregation


# Set up rich console for pretty output
console = Console()

# Configure logging
logging.basicConfig(
    level=get_settings().get_log_level(),
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)


def format_ts(ts):
    """Render a millisecond timestamp as UTC time."""
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def load_aggregation(log_file) -> CharacterAggregation:
    """Parse an event log and build the aggregation, exiting on fatal errors."""
    parser = EventLogParser()
    events = parser.parse_all(log_file)
    if parser.parse_errors:
        console.print(f"[yellow]Skipped {len(parser.parse_errors)} malformed lines[/yellow]")

    try:
        return build_character_aggregation(events)
    except AttributionError as e:
        console.print(f"[red]Attribution failed: {e}[/red]")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "config_path", type=click.Path(), help="YAML file with zone and log version overrides")
def cli(verbose, config_path):
    """Character attribution for game client event logs"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    load_and_apply_config(config_path or get_settings().config_path)


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.option("--output", "-o", help="Output file for results")
@click.option("--format", type=click.Choice(["summary", "json"]), default="summary")
def characters(log_file, output, format):
    """List the owned characters found in an event log."""
    log_path = Path(log_file)
    console.print(f"[bold green]Attributing event log:[/bold green] {log_path.name}")

    aggregation = load_aggregation(log_path)

    if format == "json":
        data = [c.to_dict() for c in aggregation.characters]
        if output:
            with open(output, "w") as f:
                json.dump(data, f, indent=2)
            console.print(f"[green]Exported {len(data)} characters to {output}[/green]")
        else:
            click.echo(json.dumps(data, indent=2))
        return

    display_characters(aggregation)


def display_characters(aggregation: CharacterAggregation):
    """Display owned character summaries."""
    table = Table(title=f"[bold]Characters ({len(aggregation.characters)})[/bold]")
    table.add_column("Name", style="green")
    table.add_column("Level", style="cyan")
    table.add_column("Ascendancy")
    table.add_column("Created", style="dim")
    table.add_column("Campaign Completed")
    table.add_column("Last Played", style="dim")

    # most recently played first
    for char in reversed(aggregation.characters):
        table.add_row(
            char.name,
            str(char.level),
            char.ascendancy,
            format_ts(char.created_ts),
            format_ts(char.campaign_completed_ts),
            format_ts(char.last_played_ts),
        )

    console.print(table)

    if aggregation.diagnostics:
        console.print(
            f"[yellow]{len(aggregation.diagnostics)} diagnostics, "
            f"run 'logattrib diagnostics' for details[/yellow]"
        )


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.argument("ts", type=int)
def level(log_file, ts):
    """Show the likely active character and level at TS (milliseconds)."""
    aggregation = load_aggregation(log_file)

    try:
        event = aggregation.guess_level_event(ts)
    except AttributionError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if event is None:
        console.print(f"[yellow]No character active at {format_ts(ts)}, assuming level 1[/yellow]")
        return

    console.print(
        f"[cyan]{format_ts(ts)}:[/cyan] [green]{event.character}[/green] "
        f"level {event.level} {event.ascendancy}"
    )


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.option("--character", "-c", help="Restrict to one character")
@click.option("--from-level", type=click.IntRange(1, 100), default=1)
@click.option("--to-level", type=click.IntRange(1, 100), default=100)
def segments(log_file, character, from_level, to_level):
    """Show when levels FROM-LEVEL..TO-LEVEL were held."""
    aggregation = load_aggregation(log_file)

    try:
        segmentation = aggregation.guess_segmentation(from_level, to_level, character)
    except AttributionError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    who = character or "all characters"
    if not segmentation:
        console.print(f"[yellow]No ranges for {who} at levels {from_level}-{to_level}[/yellow]")
        return

    table = Table(title=f"[bold]Levels {from_level}-{to_level} of {who}[/bold]")
    table.add_column("#", style="dim", width=4)
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Duration")

    for i, ts_range in enumerate(segmentation, 1):
        table.add_row(
            str(i),
            format_ts(ts_range.lo),
            format_ts(ts_range.hi),
            f"{ts_range.duration / 1000:.0f}s",
        )

    console.print(table)


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
def diagnostics(log_file):
    """List soft anomalies encountered while attributing."""
    aggregation = load_aggregation(log_file)

    if not aggregation.diagnostics:
        console.print("[green]No diagnostics[/green]")
        return

    table = Table(title=f"[bold]Diagnostics ({len(aggregation.diagnostics)})[/bold]")
    table.add_column("Severity")
    table.add_column("Code", style="cyan")
    table.add_column("Character", style="green")
    table.add_column("Time", style="dim")
    table.add_column("Message")

    for diagnostic in aggregation.diagnostics:
        color = "red" if diagnostic.severity.value == "error" else "yellow"
        table.add_row(
            f"[{color}]{diagnostic.severity.value}[/{color}]",
            diagnostic.code.value,
            diagnostic.character or "-",
            format_ts(diagnostic.ts),
            diagnostic.message,
        )

    console.print(table)


def main():
    """Entry point for the logattrib command."""
    cli()


if __name__ == "__main__":
    main()
