"""CLI entrypoint.

Commands:
- shipline run --proj DIR
- shipline doctor
- shipline init

CONTRACT
- Inputs: Command line arguments (parsed by Typer)
- Outputs (required):
  - `run`: one line per successful step on stdout
  - Exit code 0 on success, 1 on pipeline failure (single `error: ...` line on stderr)
- Invariants:
  - Nothing is written to stderr on a successful run (logging defaults to WARNING)
  - Pipeline work is delegated to shipline.pipeline
- Failure:
  - Invalid arguments raise Typer exit/error
  - PipelineError is rendered as one diagnostic line, never a traceback
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import resolve_pipeline
from .doctor import doctor_report
from .errors import PipelineError
from .init import write_pipeline_file
from .pipeline import assemble
from .schemas import summarize

app = typer.Typer(add_completion=False, help="Local build/release pipeline runner.")

console = Console()


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"shipline version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    )
):
    pass


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")
    logger.enable("shipline")


_PROJ_OPTION = typer.Option(
    "",
    "--proj",
    "-p",
    help="Project directory.",
)
_PROJ_OPTION_DEFAULT = typer.Option(
    Path("."),
    "--proj",
    "-p",
    help="Project directory (default: current dir).",
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="Pipeline YAML file (default: <proj>/.shipline.yaml, else built-in).",
)
_VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    help="Log step progress to stderr.",
)


def _fail(msg: str) -> typer.Exit:
    typer.echo(f"error: {msg}", err=True)
    return typer.Exit(code=1)


@app.command()
def run(
    proj: str = _PROJ_OPTION,
    config: Path | None = _CONFIG_OPTION,
    summary: Path | None = typer.Option(None, "--summary", help="Write a JSON run summary here."),
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Run build, test, format check and push for a project."""
    _setup_logging(verbose)
    try:
        pipeline = assemble(proj, resolve_pipeline(Path(proj), config) if proj else None)
    except PipelineError as e:
        raise _fail(str(e))

    error: PipelineError | None = None
    try:
        asyncio.run(pipeline.run(sys.stdout))
    except PipelineError as e:
        error = e

    if summary is not None:
        report = summarize(proj, pipeline.completed, error)
        try:
            summary.parent.mkdir(parents=True, exist_ok=True)
            summary.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            msg = f"failed to write summary {summary}: {e}"
            # Keep it to one line; the pipeline's own error comes first.
            raise _fail(f"{error} (also {msg})" if error is not None else msg)

    if error is not None:
        raise _fail(str(error))


@app.command()
def doctor(
    proj: Path = _PROJ_OPTION_DEFAULT,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Preflight checks: project dir and the tools each step needs."""
    try:
        pipeline = resolve_pipeline(proj, config)
    except PipelineError as e:
        raise _fail(str(e))
    report = doctor_report(project=proj, pipeline=pipeline)
    table = Table(title="shipline doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)


@app.command()
def init(
    proj: Path = _PROJ_OPTION_DEFAULT,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing pipeline file."),
) -> None:
    """Write a default `.shipline.yaml` into a project."""
    dest = write_pipeline_file(proj, force=force)
    if dest is None:
        console.print(f"[yellow]Pipeline file already exists in[/yellow] {proj} (use --force)")
    else:
        console.print(f"[green]Wrote[/green] {dest}")


if __name__ == "__main__":
    app()
