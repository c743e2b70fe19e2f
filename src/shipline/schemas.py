from __future__ import annotations

"""Run summary schema.

CONTRACT
- Inputs: outcome of one pipeline run
- Outputs:
  - JSON-serializable RunSummary (written by `shipline run --summary`)
- Invariants:
  - schema_version int field
  - status is OK, FAIL or CANCELLED
- Failure:
  - Raises pydantic ValidationError on schema mismatch
"""

from typing import Literal

from pydantic import BaseModel, Field

from .errors import PipelineError, SignalError, StepError


class RunSummary(BaseModel):
    schema_version: int = 1
    project_dir: str
    status: Literal["OK", "FAIL", "CANCELLED"]
    completed: list[str] = Field(default_factory=list)
    failed_step: str | None = None
    message: str = ""


def summarize(project_dir: str, completed: list[str], error: PipelineError | None) -> RunSummary:
    if error is None:
        return RunSummary(project_dir=project_dir, status="OK", completed=list(completed))
    return RunSummary(
        project_dir=project_dir,
        status="CANCELLED" if isinstance(error, SignalError) else "FAIL",
        completed=list(completed),
        failed_step=error.step if isinstance(error, StepError) else None,
        message=str(error),
    )
