#!/usr/bin/env python3
"""
Command-line interface for the Newman summarizer.

Built with typer and rich: summarize a directory of reports, list what would
be picked up, or scaffold a configuration file.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from newman_summary.common.config import SummaryConfig, load_config, save_config
from newman_summary.common.logger import get_logger, setup_logging
from newman_summary.common.security import SecretRedactor
from newman_summary.context import RunContext
from newman_summary.extract.locator import find_reports
from newman_summary.models import ASSERTION_KEYS, PLACEHOLDER, SKIPPED_KEYS, SummaryError
from newman_summary.pipeline import SummaryPipeline

app = typer.Typer(
    name="newman-summary",
    help="Summarize Newman report directories into one HTML document",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = get_logger(__name__)

EXIT_ERROR = 1
EXIT_FAILURES = 2


def _error_panel(message: str, title: str = "Error") -> None:
    console.print(
        Panel(
            f"[red]✗ {escape(message)}[/red]",
            title=f"[bold red]{title}[/bold red]",
            box=box.ROUNDED,
            border_style="red",
        )
    )


def _load_settings(config_file: Optional[str]) -> SummaryConfig:
    if not config_file:
        return SummaryConfig()
    try:
        return load_config(config_file)
    except FileNotFoundError:
        _error_panel(f"Config file not found:\n\n{config_file}")
        raise typer.Exit(EXIT_ERROR)
    except ValidationError as e:
        _error_panel(f"Invalid configuration:\n\n{e}", title="Validation Failed")
        raise typer.Exit(EXIT_ERROR)
    except Exception as e:
        _error_panel(f"Cannot load configuration:\n\n{e}")
        raise typer.Exit(EXIT_ERROR)


def _print_overview(context: RunContext) -> None:
    report = context.report
    if report is None:
        return
    table = Table(title="Collections", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Collection")
    table.add_column("Assertions", justify="right")
    table.add_column("Failed", justify="right")
    if report.show_skipped:
        table.add_column("Skipped", justify="right")
    table.add_column("Details")

    for entry in report.collections:
        summary = entry.summary
        failed_style = "bold red" if entry.failed else "green"
        row = [
            escape(summary.name),
            str(summary.metric(ASSERTION_KEYS, PLACEHOLDER)),
            f"[{failed_style}]{entry.failed}[/{failed_style}]",
        ]
        if report.show_skipped:
            row.append(str(summary.metric(SKIPPED_KEYS, "0")))
        row.append(summary.detail_source or "-")
        table.add_row(*row)

    console.print(table)


@app.command()
def summarize(
    input_dir: Optional[str] = typer.Argument(None, help="Directory containing extracted reports"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Summary HTML path"),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    status_json: Optional[str] = typer.Option(None, "--status-json", help="Write per-collection status JSON"),
    no_html_fallback: bool = typer.Option(False, "--no-html-fallback", help="Skip HTML failure heuristics"),
    no_redact: bool = typer.Option(False, "--no-redact", help="Disable secret redaction"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Reports processed concurrently"),
    fail_on_failures: bool = typer.Option(
        False, "--fail-on-failures", help="Exit with code 2 when any check failed"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also append logs to this file"),
):
    """
    Summarize every report.html under INPUT_DIR into one HTML document.
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file=log_file)
    config = _load_settings(config_file)

    updates = {}
    if input_dir:
        updates["input_dir"] = input_dir
    if output:
        updates["output_path"] = output
    if status_json:
        updates["status_path"] = status_json
    if no_html_fallback:
        updates["html_details_fallback"] = False
    if no_redact:
        updates["redaction_enabled"] = False
    if workers:
        updates["workers"] = workers
    if updates:
        config = config.model_copy(update=updates)

    console.print(Rule(f"[bold cyan]Summarizing: {config.input_dir}[/bold cyan]"))

    redactor = SecretRedactor(enabled=config.redaction_enabled)
    pipeline = SummaryPipeline(config, redactor=redactor)
    context = RunContext()
    try:
        pipeline.run(context)
    except SummaryError as e:
        _error_panel(str(e), title="Write Failed")
        raise typer.Exit(EXIT_ERROR)

    _print_overview(context)
    for error in context.errors:
        console.print(f"[yellow]⚠[/yellow]  Skipped [cyan]{escape(error['path'])}[/cyan]: {escape(error['error'])}")

    total_failed = context.report.total_failed if context.report else 0
    console.print(
        f"[green]✓[/green] Summary written to [cyan]{context.output_path}[/cyan] "
        f"({len(context.collections)} collection(s), {total_failed} failed)"
    )

    if fail_on_failures and total_failed > 0:
        raise typer.Exit(EXIT_FAILURES)


@app.command()
def locate(
    input_dir: str = typer.Argument("unzipped", help="Directory containing extracted reports"),
):
    """
    List the reports that would be summarized.
    """
    locations = find_reports(input_dir)
    if not locations:
        console.print(f"[yellow]⚠[/yellow]  No report.html found under [cyan]{input_dir}[/cyan]")
        return

    table = Table(title=f"Reports under {input_dir}", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Collection")
    table.add_column("Report")
    table.add_column("Structured log", justify="center")
    for location in locations:
        table.add_row(
            escape(location.collection_name),
            escape(str(location.html_path)),
            "[green]yes[/green]" if location.has_structured_log else "[dim]no[/dim]",
        )
    console.print(table)


@app.command("init-config")
def init_config(
    output: str = typer.Option("newman_summary.yaml", "--output", "-o", help="Output file path"),
):
    """
    Write a configuration file holding the default settings.
    """
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[yellow]⚠[/yellow]  File [cyan]{output_path}[/cyan] already exists.")
        if not typer.confirm("  Overwrite?", default=False):
            console.print("[dim]Cancelled[/dim]")
            raise typer.Abort()

    try:
        save_config(SummaryConfig(), str(output_path))
    except Exception as e:
        _error_panel(f"Failed to write configuration: {e}")
        raise typer.Exit(EXIT_ERROR)

    console.print(f"[green]✓[/green] Configuration written to [cyan]{output_path}[/cyan]")


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
