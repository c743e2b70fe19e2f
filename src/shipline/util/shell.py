"""Subprocess execution.

CONTRACT
- Inputs: argv, cwd, optional env overrides
- Outputs (required):
  - CmdResult(returncode, stdout, stderr, elapsed_s)
- Invariants:
  - Never goes through a shell; argv is passed as-is
  - Cancelling `Command.run` kills and reaps the child before re-raising
  - A CommandFactory is the only place steps get their Command from
- Failure:
  - Returns CmdResult with exit code (does NOT raise on non-zero exit)
  - Raises OSError if the executable cannot be spawned
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence


def which(cmd: str) -> str | None:
    for p in os.environ.get("PATH", "").split(os.pathsep):
        candidate = Path(p) / cmd
        if candidate.exists() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


@dataclass(frozen=True)
class CmdResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    elapsed_s: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class Command:
    argv: tuple[str, ...]
    cwd: Path
    env: dict[str, str] | None = None

    async def run(self) -> CmdResult:
        """Spawn the process and wait for it, capturing stdout and stderr."""
        start_t = time.monotonic()
        proc = await asyncio.create_subprocess_exec(
            *self.argv,
            cwd=str(self.cwd),
            env=(os.environ | self.env) if self.env else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout_b, stderr_b = await proc.communicate()
        except asyncio.CancelledError:
            # Timeout or run cancellation: don't leave the child behind.
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise

        return CmdResult(
            argv=self.argv,
            returncode=proc.returncode,
            stdout=stdout_b.decode(errors="replace") if stdout_b else "",
            stderr=stderr_b.decode(errors="replace") if stderr_b else "",
            elapsed_s=time.monotonic() - start_t,
        )


class CommandFactory(Protocol):
    def __call__(self, executable: str, args: Sequence[str], cwd: Path) -> Command: ...


def default_command(executable: str, args: Sequence[str], cwd: Path) -> Command:
    return Command(argv=(executable, *args), cwd=cwd)
