"""Command-line interface for taskplan."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from .exceptions import TaskplanError
from .logger import setup_logger
from .presenters import CsvPresenter, MarkdownPresenter
from .scheduler import RunMode, SchedulingResult, SchedulingService
from .sinks import YamlResultSink
from .sources import YamlItemSource
from .unified_config import discover_config

app = typer.Typer(
    name="taskplan",
    help="Schedule dependent tasks onto qualified executors on a business calendar",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Schedule output formats."""

    MARKDOWN = "markdown"
    CSV = "csv"


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: taskplan_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for taskplan commands."""
    setup_logger(verbose)
    ctx.obj = {"config": config}


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the project data YAML file")] = Path(
        "project.yaml"
    ),
    *,
    apply: Annotated[
        bool,
        typer.Option(
            "--apply",
            help="Write computed normatives and start times to the results file",
        ),
    ] = False,
    results: Annotated[
        Path | None,
        typer.Option("--results", "-r", help="Results file (default: <data file>.results.yaml)"),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Schedule output format")
    ] = OutputFormat.MARKDOWN,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute the schedule for a project data file."""
    try:
        unified = discover_config(file, (ctx.obj or {}).get("config"))
        source = YamlItemSource(file, unified.scheduler, unified.field_mappings)
        results_path = results or file.with_suffix(".results.yaml")
        service = SchedulingService(source, YamlResultSink(results_path), unified.scheduler)
        result = service.schedule(RunMode.APPLY if apply else RunMode.DRY_RUN)
    except (TaskplanError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if not result.succeeded:
        typer.echo(f"Scheduling failed: {result.failure}", err=True)
        raise typer.Exit(1)

    rendered = _render(result, source, output_format)
    if output:
        output.write_text(rendered, encoding="utf-8")
        typer.echo(f"Schedule written to {output}")
    else:
        typer.echo(rendered, nl=False)

    _echo_warnings(result)
    if apply:
        typer.echo(f"Computed fields written to {results_path}", err=True)


def _render(result: SchedulingResult, source: YamlItemSource, output_format: OutputFormat) -> str:
    resources = {r.resource_id: r for r in source.load_resources()}
    items = {i.item_id: i for i in source.load_work_items()}
    presenter = CsvPresenter() if output_format == OutputFormat.CSV else MarkdownPresenter()
    return presenter.render(result.assignments, resources, items)


def _echo_warnings(result: SchedulingResult) -> None:
    if not result.warnings:
        return
    typer.echo(f"{len(result.warnings)} warning(s):", err=True)
    for warning in result.warnings:
        typer.echo(f"  - {warning}", err=True)


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
