"""Main CLI entry point for git-ingest."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import IngestConfig, OUTPUT_FORMATS
from .errors import IngestError
from .ingest import run_ingest
from .models import IngestResult
from .scanner.classifier import format_file_size

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Attach a rich handler to the package logger."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    package_logger = logging.getLogger("git_ingest")
    package_logger.setLevel(level)

    # Avoid duplicate output when the CLI runs more than once in a process.
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=verbose, markup=False)
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.propagate = False
    return package_logger


def _extend(existing: list[str], extra: tuple[str, ...]) -> list[str] | None:
    return [*existing, *extra] if extra else None


def _print_summary(console: Console, result: IngestResult) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Output", str(result.output_path))
    table.add_row("Format", result.format)
    table.add_row("Files", str(result.total_files))
    table.add_row("Processed", f"[green]{result.stats.files_processed}[/green]")
    table.add_row("Skipped", f"[yellow]{result.stats.files_skipped}[/yellow]")
    table.add_row("Errors", f"[red]{result.stats.errors}[/red]")
    table.add_row("Content", format_file_size(result.stats.total_bytes))
    table.add_row("Artifact size", format_file_size(result.bytes_written))
    console.print("\n✅ [bold green]Ingestion complete[/bold green]")
    console.print(table)


@click.command()
@click.argument("directory", type=click.Path(file_okay=True, dir_okay=True), default=".")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file path")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format: text (separator blocks) or markdown (structured report)",
)
@click.option("--include", "-i", multiple=True, help="Only include files matching this pattern (repeatable)")
@click.option("--exclude", "-e", multiple=True, help="Exclude paths matching this pattern (repeatable)")
@click.option("--max-size", type=float, default=None, help="Maximum file size to include, in MB")
@click.option("--truncate-size", type=int, default=None, help="Truncate file content beyond this size, in KB (0 disables)")
@click.option("--concurrency", type=int, default=None, help="Maximum files read concurrently")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="YAML or JSON config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors")
@click.version_option(__version__, prog_name="git-ingest")
def cli(
    directory: str,
    output: str | None,
    output_format: str | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    max_size: float | None,
    truncate_size: int | None,
    concurrency: int | None,
    config_file: str | None,
    verbose: bool,
    quiet: bool,
):
    """Ingest a project directory into a single text or markdown file.

    Examples:
        # Plain text artifact of the current directory
        git-ingest

        # Markdown report, only Python and Markdown files
        git-ingest ./my-project -f markdown -i "*.py" -i "*.md"

        # Skip tests, cap files at 1 MB
        git-ingest ./my-project -e "tests/" --max-size 1
    """
    configure_logging(verbose=verbose, quiet=quiet)
    console = Console()

    try:
        config = IngestConfig.from_env()
        if config_file:
            config = IngestConfig.from_file(Path(config_file), base=config)
        config = config.merged(
            format=output_format,
            include=_extend(config.include, include),
            exclude=_extend(config.exclude, exclude),
            max_file_size_mb=max_size,
            truncate_size_kb=truncate_size,
            concurrency_limit=concurrency,
        )
        logger.debug("Effective configuration: %s", config.model_dump())

        if not quiet:
            console.print(f"🔍 Analyzing project: [cyan]{Path(directory).resolve()}[/cyan]")

        result = run_ingest(directory, config, output)
    except IngestError as exc:
        click.echo(f"❌ Error: {exc.message}", err=True)
        if verbose and exc.details:
            click.echo(f"   Details: {exc.details}", err=True)
        sys.exit(1)

    if not quiet:
        _print_summary(console, result)


if __name__ == "__main__":
    cli()
