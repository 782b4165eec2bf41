import os
import sys

from sonarstep.core.launcher import Launcher
from sonarstep.services.arguments import ArgumentList
from sonarstep.services.build_listener import BuildListener


def test_launch_logs_masked_command_and_streams_output(tmp_path):
    args = ArgumentList(sys.executable, "-c", "print('ANALYSIS SUCCESSFUL')")
    args.add_masked("-Dsonar.login=tok-9")
    listener = BuildListener()

    rc = Launcher(is_unix=True, timeout_sec=30).launch(args, dict(os.environ), tmp_path, listener)

    assert rc == 0
    log = listener.read_log()
    assert log.splitlines()[0].startswith("$ ")
    assert "tok-9" not in log
    assert "ANALYSIS SUCCESSFUL" in log


def test_explicit_platform_and_timeout():
    launcher = Launcher(is_unix=False, timeout_sec=5)
    assert launcher.is_unix is False
    assert launcher.timeout_sec == 5


def test_timeout_defaults_to_settings(monkeypatch):
    monkeypatch.setattr("sonarstep.core.launcher.settings.SCANNER_TIMEOUT_SEC", 77)
    assert Launcher().timeout_sec == 77
