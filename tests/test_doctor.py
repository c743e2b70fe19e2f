from shipline.config import DEFAULT_PIPELINE, PipelineConfig, StepConfig
from shipline.doctor import doctor_report


def _fake_bin(d, name):
    p = d / name
    p.write_text("#!/bin/sh\n")
    p.chmod(0o755)
    return p


def test_doctor_all_present(tmp_path, monkeypatch):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    for name in ("go", "gofmt", "git"):
        _fake_bin(bindir, name)
    monkeypatch.setenv("PATH", str(bindir))
    proj = tmp_path / "proj"
    (proj / ".git").mkdir(parents=True)

    report = doctor_report(proj, DEFAULT_PIPELINE)

    assert report.ok
    names = [i.name for i in report.items]
    # go is checked once even though two steps use it
    assert names == ["project dir", "git repo", "go binary", "gofmt binary", "git binary"]
    assert all(i.status == "OK" for i in report.items)


def test_doctor_missing_binary(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    report = doctor_report(tmp_path, DEFAULT_PIPELINE)

    assert not report.ok
    statuses = {i.name: i.status for i in report.items}
    assert statuses["go binary"] == "FAIL"
    assert statuses["git repo"] == "WARN"


def test_doctor_missing_project(tmp_path, monkeypatch):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    _fake_bin(bindir, "make")
    monkeypatch.setenv("PATH", str(bindir))
    cfg = PipelineConfig(steps=[StepConfig(name="build", executable="make", message="ok")])

    report = doctor_report(tmp_path / "nope", cfg)

    assert not report.ok
    assert report.items[0].status == "FAIL"
    # no git step configured -> no git repo check
    assert "git repo" not in [i.name for i in report.items]
