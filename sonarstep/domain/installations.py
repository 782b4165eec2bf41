from __future__ import annotations

import json
import logging
from pathlib import Path

from sonarstep.domain.schemas import (
    InstallationsConfig,
    JdkInstallation,
    ScannerInstallation,
    SonarInstallation,
)

logger = logging.getLogger(__name__)


class InstallationRegistry:
    """
    Global SonarQube server, scanner and JDK installations, looked up by name.
    """

    def __init__(self, config: InstallationsConfig | None = None):
        self.config = config or InstallationsConfig()

    @classmethod
    def load(cls, path: Path) -> "InstallationRegistry":
        if not path.exists():
            logger.warning("Installations file %s not found; no installations configured", path)
            return cls()
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(InstallationsConfig.model_validate(data))

    def sonar_installations(self) -> list[SonarInstallation]:
        return list(self.config.sonar)

    def scanner_installations(self) -> list[ScannerInstallation]:
        return list(self.config.scanners)

    def sonar(self, name: str | None) -> SonarInstallation | None:
        name = (name or "").strip()
        available = self.config.sonar
        if not name and available:
            return available[0]
        for si in available:
            if si.name == name:
                return si
        return None

    def validation_message(self, name: str | None) -> str | None:
        name = (name or "").strip()
        inst = self.sonar(name)
        if inst is None:
            if not name:
                return f"No SonarQube installation found ({len(self.config.sonar)} configured)"
            return f"SonarQube installation '{name}' no longer exists"
        if inst.disabled:
            return f"SonarQube installation '{inst.name}' is disabled"
        return None

    def scanner(self, name: str | None) -> ScannerInstallation | None:
        for sri in self.config.scanners:
            if name and sri.name == name:
                return sri
        # No match: fall back to the first configured scanner
        if self.config.scanners:
            return self.config.scanners[0]
        return None

    def jdk(self, name: str | None) -> JdkInstallation | None:
        if not name:
            return None
        for j in self.config.jdks:
            if j.name == name:
                return j
        return None
