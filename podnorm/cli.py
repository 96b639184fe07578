"""
Podnorm Command Line Interface
==============================

Usage:
    podnorm --help                       # Show all commands
    podnorm check-config                 # Validate configuration
    podnorm run                          # Normalize every feed file of the input directory
    podnorm parse 1234_200.xml           # Normalize one file and print table counts
    podnorm parse 1234_200.xml --json    # Print the records as JSON lines
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config.settings import get_settings
from .ingestion.runner import FeedBatchRunner, process_feed_file
from .output.sinks import MemorySink
from .utils.exceptions import PodnormError
from .utils.logging import configure_application_logging, get_logger_for_component

console = Console()


def _configure_logging(debug: bool) -> None:
    settings = get_settings()
    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """Podnorm - streaming podcast feed normalizer."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
def check_config():
    """Validate configuration and environment variables."""
    console.print("[bold blue]Checking Podnorm Configuration[/bold blue]")

    try:
        settings = get_settings()
    except PodnormError as e:
        console.print(f"[bold red]Configuration error: {escape(str(e))}[/bold red]")
        sys.exit(1)

    table = Table(title="Configuration Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    checks = [
        ("Ingestion", _check_ingestion_config),
        ("Output", _check_output_config),
        ("Logging", _check_logging_config),
    ]

    all_passed = True
    for name, check_func in checks:
        status, details = check_func(settings)
        table.add_row(name, "Valid" if status else "Invalid", details)
        all_passed = all_passed and status

    console.print(table)

    if all_passed:
        console.print("[bold green]All configuration checks passed[/bold green]")
    else:
        console.print("[bold red]Configuration validation failed[/bold red]")
        sys.exit(1)


@cli.command()
@click.option('--input-dir', '-i', type=click.Path(file_okay=False), help='Directory holding feed files')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False), help='Base directory for run folders')
@click.option('--parallel', '-p', type=click.IntRange(1, 32), help='Feed files processed concurrently')
@click.pass_context
def run(ctx, input_dir: Optional[str], output_dir: Optional[str], parallel: Optional[int]):
    """Normalize every feed file of the input directory."""
    _configure_logging(ctx.obj.get('debug', False))
    logger = get_logger_for_component('cli')

    try:
        summary = asyncio.run(
            FeedBatchRunner().run(
                input_dir=input_dir, output_dir=output_dir, parallel_feeds=parallel
            )
        )
    except PodnormError as e:
        logger.error(f"Run aborted: {e}")
        console.print(f"[bold red]{escape(e.user_message)}: {escape(str(e))}[/bold red]")
        sys.exit(1)

    table = Table(title=f"Run {summary.run_directory}")
    table.add_column("Table", style="cyan")
    table.add_column("Records", justify="right")
    for name, count in sorted(summary.table_totals().items()):
        table.add_row(name, str(count))
    console.print(table)

    console.print(
        f"Feeds: {summary.succeeded}/{summary.total_files} succeeded, "
        f"{summary.records_emitted} records written"
    )
    for failed in summary.failed:
        console.print(f"  [red]{escape(failed.path.name)}[/red] {escape(failed.error or '')}")

    if summary.failed:
        sys.exit(2)


@cli.command()
@click.argument('feed_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--feed-id', type=int, help='Override the feed id taken from the file name')
@click.option('--json', 'as_json', is_flag=True, help='Print records as JSON lines')
@click.pass_context
def parse(ctx, feed_file: str, feed_id: Optional[int], as_json: bool):
    """Normalize a single feed file without writing output files."""
    _configure_logging(ctx.obj.get('debug', False))

    path = Path(feed_file)
    sink = MemorySink()
    result = process_feed_file(path, sink, feed_id=feed_id)

    if as_json:
        for record in sink.records:
            click.echo(record.to_json())
    else:
        table = Table(title=path.name)
        table.add_column("Table", style="cyan")
        table.add_column("Records", justify="right")
        for name, count in sorted(sink.tables().items()):
            table.add_row(name, str(count))
        console.print(table)
        console.print(
            f"Items kept: {result.items_emitted}, discarded: {result.items_discarded}"
        )

    if not result.success:
        click.echo(f"[{result.error_code}] {result.error}", err=True)
        sys.exit(1)


def _check_ingestion_config(settings) -> tuple:
    """Check ingestion configuration."""
    input_dir = Path(settings.ingestion.input_dir)
    if not input_dir.is_dir():
        return False, f"Input directory missing: {input_dir}"
    return True, (
        f"Dir: {input_dir}, Extensions: {', '.join(settings.ingestion.extensions)}, "
        f"Parallel: {settings.ingestion.parallel_feeds}"
    )


def _check_output_config(settings) -> tuple:
    """Check output configuration."""
    try:
        Path(settings.output.output_dir).mkdir(parents=True, exist_ok=True)
        return True, f"Dir: {settings.output.output_dir}, Pretty: {settings.output.pretty_json}"
    except OSError as e:
        return False, str(e)


def _check_logging_config(settings) -> tuple:
    """Check logging configuration."""
    try:
        if settings.logging.file_path:
            Path(settings.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
        return True, f"Level: {settings.logging.level.value}, Console: {settings.logging.console_logging}"
    except OSError as e:
        return False, str(e)


def main() -> None:
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Podnorm interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
