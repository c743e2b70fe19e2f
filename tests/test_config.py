import pytest
import yaml

from shipline.config import (
    CONFIG_FILENAME,
    DEFAULT_PIPELINE,
    dump_pipeline_file,
    load_pipeline_file,
    parse_pipeline,
    resolve_pipeline,
)
from shipline.errors import ValidationError


def test_default_pipeline():
    steps = DEFAULT_PIPELINE.steps
    assert [s.name for s in steps] == ["go build", "go test", "go fmt", "git push"]
    assert [s.kind for s in steps] == ["plain", "plain", "validating", "timeout"]
    assert [s.message for s in steps] == [
        "go build: successful",
        "go test: successful",
        "gofmt: successful",
        "git push: successful",
    ]
    assert steps[-1].timeout_s == 10


def test_load_pipeline_file(tmp_path):
    p = tmp_path / "pipeline.yaml"
    p.write_text(
        """
steps:
  - name: build
    executable: make
    args: [build]
    message: built
  - name: push
    kind: timeout
    executable: git
    args: [push]
    message: pushed
    timeout_s: 30
"""
    )
    cfg = load_pipeline_file(p)
    assert len(cfg.steps) == 2
    assert cfg.steps[0].kind == "plain"
    assert cfg.steps[0].args == ("build",)
    assert cfg.steps[1].timeout_s == 30.0


def test_invalid_kind_rejected():
    with pytest.raises(ValidationError, match="invalid pipeline file"):
        parse_pipeline({"steps": [{"name": "x", "executable": "y", "message": "z", "kind": "parallel"}]})


def test_missing_fields_rejected():
    with pytest.raises(ValidationError):
        parse_pipeline({"steps": [{"name": "x"}]})


def test_empty_steps_rejected():
    with pytest.raises(ValidationError):
        parse_pipeline({"steps": []})


def test_duplicate_names_rejected():
    step = {"name": "x", "executable": "y", "message": "z"}
    with pytest.raises(ValidationError, match="duplicate step name"):
        parse_pipeline({"steps": [step, step]})


def test_bad_yaml_rejected(tmp_path):
    p = tmp_path / "pipeline.yaml"
    p.write_text("steps: [unclosed")
    with pytest.raises(ValidationError):
        load_pipeline_file(p)

    p.write_text("- just\n- a list\n")
    with pytest.raises(ValidationError, match="expected a mapping"):
        load_pipeline_file(p)


def test_dump_is_loadable(tmp_path):
    text = dump_pipeline_file(DEFAULT_PIPELINE)
    data = yaml.safe_load(text)
    assert data["steps"][2]["kind"] == "validating"
    assert parse_pipeline(data) == DEFAULT_PIPELINE


def test_resolve_pipeline_precedence(tmp_path):
    # Nothing on disk -> built-in default
    assert resolve_pipeline(tmp_path) is DEFAULT_PIPELINE

    (tmp_path / CONFIG_FILENAME).write_text(
        "steps:\n  - {name: only, executable: make, message: done}\n"
    )
    assert [s.name for s in resolve_pipeline(tmp_path).steps] == ["only"]

    explicit = tmp_path / "other.yaml"
    explicit.write_text("steps:\n  - {name: explicit, executable: make, message: done}\n")
    assert [s.name for s in resolve_pipeline(tmp_path, explicit).steps] == ["explicit"]

    with pytest.raises(ValidationError, match="not found"):
        resolve_pipeline(tmp_path, tmp_path / "missing.yaml")
