"""shipline package.

Simple API:

    import shipline

    # build, test, gofmt check and push a Go project, lines go to stdout
    shipline.run_pipeline("/path/to/project")
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger

from .config import DEFAULT_PIPELINE, PipelineConfig, StepConfig, load_pipeline_file
from .errors import (
    PipelineError,
    SignalError,
    SinkWriteError,
    StepError,
    ValidationError,
    same_step,
)
from .pipeline import Pipeline, run
from .util.shell import CommandFactory, default_command

__version__ = "0.1.0"

# Library use stays quiet; the CLI turns logging back on.
logger.disable("shipline")


def run_pipeline(
    project_dir: str | Path,
    out: Optional[TextIO] = None,
    *,
    config: Optional[PipelineConfig] = None,
    command: CommandFactory = default_command,
) -> list[str]:
    """Run the pipeline synchronously.

    Args:
        project_dir: Project the steps run in (required, non-empty)
        out: Sink for success lines (default: sys.stdout)
        config: Optional pipeline definition (default: build, test, fmt, push)
        command: Subprocess factory, swap it out to fake the tools

    Returns:
        Names of the steps that completed, in order.

    Raises:
        PipelineError subclasses on validation, step, sink or signal failure.
    """
    pipeline = asyncio.run(
        run(project_dir, out if out is not None else sys.stdout, config=config, command=command)
    )
    return list(pipeline.completed)


__all__ = [
    "run_pipeline",
    "run",
    "Pipeline",
    "PipelineConfig",
    "StepConfig",
    "DEFAULT_PIPELINE",
    "load_pipeline_file",
    "PipelineError",
    "ValidationError",
    "StepError",
    "SignalError",
    "SinkWriteError",
    "same_step",
]
