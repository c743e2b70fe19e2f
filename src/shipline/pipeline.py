from __future__ import annotations

"""Pipeline runner.

CONTRACT
- Inputs: project dir, text sink, optional PipelineConfig and CommandFactory
- Outputs (required):
  - One line per successful step written to the sink, in step order
- Invariants:
  - Empty project dir is rejected before any step is built or spawned
  - Steps run one at a time; the first failure ends the run
  - Errors are raised as-is (StepError is never wrapped)
  - Signal handlers installed for the run are removed before returning
- Failure:
  - ValidationError, StepError, SinkWriteError or SignalError
"""

import asyncio
import contextlib
import signal
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, TextIO

from loguru import logger

from .config import DEFAULT_PIPELINE, PipelineConfig, StepConfig
from .errors import PipelineError, SignalError, SinkWriteError, ValidationError
from .steps.base import Step
from .steps.timeout import TimeoutStep
from .steps.validating import ValidatingStep
from .util.shell import CommandFactory, default_command

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


def build_step(cfg: StepConfig, project_dir: Path, command: CommandFactory = default_command) -> Step:
    common = dict(
        name=cfg.name,
        executable=cfg.executable,
        args=tuple(cfg.args),
        project_dir=project_dir,
        message=cfg.message,
        command=command,
    )
    if cfg.kind == "plain":
        return Step(**common)
    if cfg.kind == "validating":
        return ValidatingStep(**common)
    if cfg.kind == "timeout":
        return TimeoutStep(**common, timeout_s=cfg.timeout_s)
    raise ValidationError(f"unknown step kind: {cfg.kind}")


def build_steps(
    project_dir: Path,
    config: PipelineConfig | None = None,
    command: CommandFactory = default_command,
) -> list[Step]:
    cfg = config or DEFAULT_PIPELINE
    return [build_step(s, project_dir, command) for s in cfg.steps]


@dataclass
class Pipeline:
    steps: Sequence[Step]
    completed: list[str] = field(default_factory=list)

    async def _run_steps(self, out: TextIO) -> None:
        for i, step in enumerate(self.steps):
            logger.debug(f"running step {i + 1}/{len(self.steps)}: {step.name}")
            msg = await step.execute()
            try:
                out.write(msg + "\n")
                out.flush()
            except (OSError, ValueError) as e:
                raise SinkWriteError(e) from e
            self.completed.append(step.name)
            logger.info(f"{step.name}: ok")

    async def run(
        self,
        out: TextIO,
        *,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        """Run all steps on a background task, racing it against `signals`.

        On a signal the background task is cancelled, which kills the
        in-flight subprocess, and SignalError is raised. Off the main thread
        no handlers can be installed, so the run is not signal-aware there.
        """
        loop = asyncio.get_running_loop()
        if signals and threading.current_thread() is not threading.main_thread():
            logger.debug("not on the main thread; running without signal handlers")
            signals = ()
        received: asyncio.Future[signal.Signals] = loop.create_future()

        def _on_signal(sig: signal.Signals) -> None:
            if not received.done():
                received.set_result(sig)

        for sig in signals:
            loop.add_signal_handler(sig, _on_signal, sig)

        task = asyncio.create_task(self._run_steps(out), name="shipline-steps")
        try:
            await asyncio.wait({task, received}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            for sig in signals:
                loop.remove_signal_handler(sig)

        if task.done():
            received.cancel()
            # Re-raises the step's error, if any.
            task.result()
            logger.debug("pipeline succeeded")
            return

        sig = received.result()
        logger.debug(f"pipeline cancelled by {sig.name}")
        task.cancel()
        # A step may still fail while unwinding; the signal is the outcome.
        with contextlib.suppress(asyncio.CancelledError, PipelineError):
            await task
        raise SignalError(sig)


def assemble(
    project_dir: str | Path | None,
    config: PipelineConfig | None = None,
    command: CommandFactory = default_command,
) -> Pipeline:
    if project_dir is None or str(project_dir) == "":
        raise ValidationError("project dir is required")
    return Pipeline(steps=build_steps(Path(project_dir), config, command))


async def run(
    project_dir: str | Path | None,
    out: TextIO,
    *,
    config: PipelineConfig | None = None,
    command: CommandFactory = default_command,
    signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
) -> Pipeline:
    """Validate inputs, assemble the pipeline and run it to completion.

    Returns the finished Pipeline so callers can see which steps completed.
    """
    pipeline = assemble(project_dir, config, command)
    await pipeline.run(out, signals=signals)
    return pipeline
