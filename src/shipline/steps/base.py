"""Plain step.

CONTRACT
- Inputs: name, executable, args, project dir, success message, command factory
- Outputs (required):
  - execute() returns the success message
- Invariants:
  - Runs exactly one subprocess per execute(), in project_dir
  - No deadline: blocks until the subprocess exits
- Failure:
  - Raises StepError("failed to execute") on spawn failure or non-zero exit
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from ..errors import CommandFailed, StepError
from ..util.shell import CmdResult, CommandFactory, default_command


@dataclass(frozen=True)
class Step:
    name: str
    executable: str
    args: tuple[str, ...]
    project_dir: Path
    message: str
    command: CommandFactory = default_command

    async def _spawn(self) -> CmdResult:
        cmd = self.command(self.executable, self.args, self.project_dir)
        logger.debug(f"[{self.name}] spawning {list(cmd.argv)} in {cmd.cwd}")
        try:
            res = await cmd.run()
        except OSError as e:
            raise StepError(self.name, "failed to execute", e) from e
        logger.debug(f"[{self.name}] exit {res.returncode} after {res.elapsed_s:.2f}s")
        if not res.ok:
            cause = CommandFailed(res.returncode, res.stderr)
            raise StepError(self.name, "failed to execute", cause) from cause
        return res

    async def execute(self) -> str:
        await self._spawn()
        return self.message
