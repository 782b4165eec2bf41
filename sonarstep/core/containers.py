from __future__ import annotations

from pathlib import Path

from sonarstep.core.config import settings
from sonarstep.core.launcher import Launcher
from sonarstep.domain.installations import InstallationRegistry
from sonarstep.domain.schemas import StepConfig
from sonarstep.services.scanner_service import ScannerStep


def build_registry(path: Path | None = None) -> InstallationRegistry:
    return InstallationRegistry.load(path or Path(settings.INSTALLATIONS_FILE))


def build_step(
    config: StepConfig,
    registry: InstallationRegistry | None = None,
    launcher: Launcher | None = None,
) -> ScannerStep:
    """Wire a scanner step against the global installations.

    ``registry`` defaults to the file named by ``INSTALLATIONS_FILE``.
    """
    return ScannerStep(config, registry or build_registry(), launcher or Launcher())
