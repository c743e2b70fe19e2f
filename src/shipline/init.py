from __future__ import annotations

"""Pipeline file initializer.

CONTRACT
- Inputs: Project path
- Outputs (required):
  - Writes <project>/.shipline.yaml with the default pipeline
- Invariants:
  - Does not overwrite an existing file (unless force=True)
- Failure:
  - Raises OSError on permission issues
"""

from pathlib import Path

from .config import CONFIG_FILENAME, DEFAULT_PIPELINE, dump_pipeline_file


def write_pipeline_file(project: Path, force: bool = False) -> Path | None:
    dest = project / CONFIG_FILENAME
    if dest.exists() and not force:
        return None
    project.mkdir(parents=True, exist_ok=True)
    dest.write_text(dump_pipeline_file(DEFAULT_PIPELINE), encoding="utf-8")
    return dest
