from __future__ import annotations

"""Environment health checks.

CONTRACT
- Inputs: Project path, PipelineConfig
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - Checks: project dir, git repo + origin remote (when a git step is configured),
    one binary check per distinct executable in the pipeline
  - Does not modify system state (read-only checks)
- Failure:
  - Returns DoctorReport with ok=False if the project dir or a binary is missing
"""

from dataclasses import dataclass
from pathlib import Path

from .config import PipelineConfig
from .util.shell import which


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


def _is_git_repo(project: Path) -> bool:
    return (project / ".git").exists()


def doctor_report(project: Path, pipeline: PipelineConfig) -> DoctorReport:
    items: list[DoctorItem] = []
    ok = True

    if project.is_dir():
        items.append(DoctorItem("project dir", "OK", str(project)))
    else:
        ok = False
        items.append(DoctorItem("project dir", "FAIL", f"Not a directory: {project}"))

    if any(s.executable == "git" for s in pipeline.steps):
        if _is_git_repo(project):
            items.append(DoctorItem("git repo", "OK", str(project / ".git")))
        else:
            # Push will fail, but the build/test steps can still be useful.
            items.append(DoctorItem("git repo", "WARN", "Not a git repo; push step will fail."))

    seen: set[str] = set()
    for s in pipeline.steps:
        if s.executable in seen:
            continue
        seen.add(s.executable)
        path = which(s.executable)
        if path:
            items.append(DoctorItem(f"{s.executable} binary", "OK", path))
        else:
            ok = False
            items.append(
                DoctorItem(f"{s.executable} binary", "FAIL", f"{s.executable} not found in PATH (needed by {s.name!r})")
            )

    return DoctorReport(ok=ok, items=items)
