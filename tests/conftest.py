import pytest

from sonarstep.core.config import settings
from sonarstep.core.security import secret_filter
from sonarstep.domain.installations import InstallationRegistry
from sonarstep.domain.models import BuildContext
from sonarstep.domain.schemas import InstallationsConfig, SonarInstallation
from sonarstep.services.build_listener import BuildListener


class FakeLauncher:
    """Records the launch instead of starting a process."""

    def __init__(self, exit_code=0, output="", is_unix=True, error=None):
        self.is_unix = is_unix
        self.exit_code = exit_code
        self.output = output
        self.error = error
        self.calls = []

    def launch(self, args, env, cwd, listener):
        self.calls.append({"args": args.to_list(), "display": args.to_display(), "env": dict(env), "cwd": cwd})
        if self.error is not None:
            raise self.error
        for line in self.output.splitlines():
            listener.write(line)
        return self.exit_code


@pytest.fixture(autouse=True)
def _use_tmp_data(tmp_path, monkeypatch):
    """Redirect build logs to a temp directory so tests never touch real data."""
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))


@pytest.fixture(autouse=True)
def _reset_secret_filter():
    yield
    secret_filter.clear()


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def listener(tmp_path):
    return BuildListener(log_path=tmp_path / "logs" / "build.log")


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "ws"
    ws.mkdir()
    return ws


@pytest.fixture
def build(workspace):
    return BuildContext(build_id="42", workspace=workspace)


@pytest.fixture
def registry():
    return InstallationRegistry(
        InstallationsConfig(sonar=[SonarInstallation(name="default", server_url="http://sonar:9000")])
    )
