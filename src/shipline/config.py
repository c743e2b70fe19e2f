from __future__ import annotations

"""Pipeline configuration.

CONTRACT
- Inputs: YAML file path (.shipline.yaml) or dictionary data
- Outputs (required):
  - Validated PipelineConfig / StepConfig objects
- Invariants:
  - DEFAULT_PIPELINE is build -> test -> fmt -> push, in that order
  - Step kinds are one of plain / validating / timeout
  - Step names are unique within a pipeline
- Failure:
  - Raises ValidationError on invalid schema or duplicate names
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from .errors import ValidationError

StepKind = Literal["plain", "validating", "timeout"]

CONFIG_FILENAME = ".shipline.yaml"


@dataclass(frozen=True)
class StepConfig:
    name: str
    executable: str
    message: str
    args: tuple[str, ...] = ()
    kind: StepKind = "plain"
    timeout_s: float | None = None


@dataclass(frozen=True)
class PipelineConfig:
    steps: list[StepConfig] = field(default_factory=list)


DEFAULT_PIPELINE = PipelineConfig(
    steps=[
        StepConfig(
            name="go build",
            executable="go",
            args=("build", ".", "errors"),
            message="go build: successful",
        ),
        StepConfig(
            name="go test",
            executable="go",
            args=("test", "-v"),
            message="go test: successful",
        ),
        StepConfig(
            name="go fmt",
            executable="gofmt",
            args=("-l", "."),
            message="gofmt: successful",
            kind="validating",
        ),
        StepConfig(
            name="git push",
            executable="git",
            args=("push", "origin", "main"),
            message="git push: successful",
            kind="timeout",
            timeout_s=10,
        ),
    ]
)


PIPELINE_SCHEMA = {
    "type": "object",
    "properties": {
        "steps": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "executable": {"type": "string", "minLength": 1},
                    "args": {"type": "array", "items": {"type": "string"}},
                    "message": {"type": "string"},
                    "kind": {"type": "string", "enum": ["plain", "validating", "timeout"]},
                    "timeout_s": {"type": ["number", "null"], "minimum": 0},
                },
                "required": ["name", "executable", "message"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["steps"],
}


def parse_pipeline(data: dict[str, Any]) -> PipelineConfig:
    import jsonschema  # lazy import

    try:
        jsonschema.validate(instance=data, schema=PIPELINE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValidationError(f"invalid pipeline file: {e.message}") from e

    steps: list[StepConfig] = []
    seen: set[str] = set()
    for s in data["steps"]:
        name = str(s["name"])
        if name in seen:
            raise ValidationError(f"invalid pipeline file: duplicate step name {name!r}")
        seen.add(name)
        timeout = s.get("timeout_s")
        steps.append(
            StepConfig(
                name=name,
                executable=str(s["executable"]),
                args=tuple(str(a) for a in s.get("args", []) or []),
                message=str(s["message"]),
                kind=s.get("kind", "plain"),
                timeout_s=float(timeout) if timeout is not None else None,
            )
        )
    return PipelineConfig(steps=steps)


def load_pipeline_file(path: Path) -> PipelineConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"invalid pipeline file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"invalid pipeline file {path}: expected a mapping")
    return parse_pipeline(data)


def dump_pipeline_file(cfg: PipelineConfig) -> str:
    steps = []
    for s in cfg.steps:
        item: dict[str, Any] = {
            "name": s.name,
            "kind": s.kind,
            "executable": s.executable,
            "args": list(s.args),
            "message": s.message,
        }
        if s.timeout_s is not None:
            item["timeout_s"] = s.timeout_s
        steps.append(item)
    return yaml.safe_dump({"steps": steps}, sort_keys=False)


def resolve_pipeline(project_dir: Path, config_file: Path | None = None) -> PipelineConfig:
    """Explicit file, else <project>/.shipline.yaml, else the default pipeline."""
    if config_file is not None:
        if not config_file.exists():
            raise ValidationError(f"pipeline file not found: {config_file}")
        return load_pipeline_file(config_file)
    project_file = project_dir / CONFIG_FILENAME
    if project_file.exists():
        return load_pipeline_file(project_file)
    return DEFAULT_PIPELINE


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Pipeline config checker")
    parser.add_argument("--file", required=True, help="Path to .shipline.yaml")
    args = parser.parse_args()

    try:
        cfg = load_pipeline_file(Path(args.file))
        print(f"Loaded {len(cfg.steps)} steps.")
        for s in cfg.steps:
            print(f"  {s.name} ({s.kind}): {s.executable} {' '.join(s.args)}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
