"""Timeout step.

CONTRACT
- Inputs: Step fields plus timeout_s (0/None -> 10s)
- Outputs (required):
  - execute() returns the success message
- Invariants:
  - The subprocess is killed and reaped when the deadline passes
  - A deadline hit is always reported as "failed timeout" with a
    DeadlineExceeded cause, whatever the process itself reported
- Failure:
  - StepError("failed timeout") on deadline
  - StepError("failed to execute") on any other failure
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loguru import logger

from ..errors import DeadlineExceeded, StepError
from .base import Step

DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class TimeoutStep(Step):
    timeout_s: float | None = DEFAULT_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.timeout_s:
            object.__setattr__(self, "timeout_s", DEFAULT_TIMEOUT_S)

    async def execute(self) -> str:
        try:
            await asyncio.wait_for(self._spawn(), timeout=self.timeout_s)
        except TimeoutError:
            logger.debug(f"[{self.name}] deadline of {self.timeout_s}s exceeded")
            cause = DeadlineExceeded(self.timeout_s)
            raise StepError(self.name, "failed timeout", cause) from cause
        return self.message
