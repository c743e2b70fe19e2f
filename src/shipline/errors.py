"""Pipeline error model.

CONTRACT
- Inputs: step names, failure categories, underlying exceptions
- Outputs:
  - PipelineError subclasses raised by steps and the runner
- Invariants:
  - StepError matching is by step name only (see `same_step`)
  - Causes are preserved on `.cause` and `__cause__`
- Failure:
  - None (pure data)
"""

from __future__ import annotations

import signal


class PipelineError(Exception):
    """Base class for everything the runner raises."""


class ValidationError(PipelineError):
    """Missing or invalid configuration; raised before any step runs."""


class SinkWriteError(PipelineError):
    def __init__(self, cause: BaseException):
        super().__init__(f"failed to write output: {cause}")
        self.cause = cause
        self.__cause__ = cause


class SignalError(PipelineError):
    def __init__(self, sig: signal.Signals):
        super().__init__(f"received signal {sig.name}")
        self.signal = sig


class CommandFailed(Exception):
    """A subprocess exited with a non-zero status."""

    def __init__(self, returncode: int, stderr: str = ""):
        super().__init__(f"exit status {returncode}")
        self.returncode = returncode
        self.stderr = stderr


class DeadlineExceeded(Exception):
    def __init__(self, timeout_s: float | None = None):
        super().__init__("deadline exceeded")
        self.timeout_s = timeout_s


class StepError(PipelineError):
    """Failure of a single step.

    Two StepErrors describe the same kind of failure iff their `step` names
    are equal. Use `matches` / `same_step` for that; `==` stays identity.
    """

    def __init__(self, step: str, message: str, cause: BaseException | None = None):
        self.step = step
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f'Step: "{self.step}": {self.message}'
        if self.cause is not None:
            text += f": Cause: {self.cause}"
        return text

    def __repr__(self) -> str:
        return f"StepError(step={self.step!r}, message={self.message!r}, cause={self.cause!r})"

    def matches(self, other: object) -> bool:
        return isinstance(other, StepError) and other.step == self.step


def same_step(err: BaseException | None, target: BaseException | None) -> bool:
    """True when both are StepErrors raised by the same step."""
    return isinstance(err, StepError) and err.matches(target)
