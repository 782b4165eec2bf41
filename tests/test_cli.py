import json

from conftest import FakeLauncher

from sonarstep import cli
from sonarstep.services.scanner_service import ScannerStep


def _installations(tmp_path):
    p = tmp_path / "installations.json"
    p.write_text(json.dumps({"sonar": [{"name": "default", "server_url": "http://sonar:9000"}]}), encoding="utf-8")
    return p


def _patch_launcher(monkeypatch, launcher):
    monkeypatch.setattr(
        "sonarstep.cli.build_step",
        lambda config, registry: ScannerStep(config, registry, launcher),
    )


def test_cli_success_prints_analysis_url(tmp_path, workspace, monkeypatch, capsys):
    launcher = FakeLauncher(output="ANALYSIS SUCCESSFUL, you can browse http://sonar:9000/dashboard/index/demo\n")
    _patch_launcher(monkeypatch, launcher)

    rc = cli.main(
        [
            "--workspace", str(workspace),
            "--installations", str(_installations(tmp_path)),
            "--properties", "sonar.projectKey=${KEY}",
            "-D", "KEY=demo",
            "--build-id", "7",
        ]
    )

    assert rc == 0
    assert "-Dsonar.projectKey=demo" in launcher.calls[0]["args"]
    out = capsys.readouterr().out
    assert "Analysis result: http://sonar:9000/dashboard/index/demo" in out
    assert (tmp_path / "data" / "builds" / "7" / "build.log").exists()


def test_cli_failure_exit_code(tmp_path, workspace, monkeypatch):
    _patch_launcher(monkeypatch, FakeLauncher(exit_code=1))
    rc = cli.main(["--workspace", str(workspace), "--installations", str(_installations(tmp_path))])
    assert rc == 1


def test_cli_reads_properties_file(tmp_path, workspace, monkeypatch):
    launcher = FakeLauncher()
    _patch_launcher(monkeypatch, launcher)
    props = tmp_path / "extra.properties"
    props.write_text("sonar.sources=src\n", encoding="utf-8")

    cli.main(
        [
            "--workspace", str(workspace),
            "--installations", str(_installations(tmp_path)),
            "--properties-file", str(props),
        ]
    )

    assert "-Dsonar.sources=src" in launcher.calls[0]["args"]


def test_cli_rejects_invalid_installations(tmp_path, workspace):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"sonar": [{"server_url": "x"}]}), encoding="utf-8")
    assert cli.main(["--workspace", str(workspace), "--installations", str(bad)]) == 2


def test_cli_reports_unreadable_properties_file(tmp_path, workspace, capsys):
    rc = cli.main(
        [
            "--workspace", str(workspace),
            "--installations", str(_installations(tmp_path)),
            "--properties-file", str(tmp_path / "missing.properties"),
        ]
    )
    assert rc == 2
    assert "cannot read properties file" in capsys.readouterr().err
