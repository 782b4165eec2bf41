from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class BuildContext:
    build_id: str
    workspace: Path | None
    # Workspace-relative directory the build runs in (e.g. an SCM module checkout)
    module_dir: str | None = None
    build_vars: dict[str, str] = field(default_factory=dict)
    # JDK configured at project level, used when the step names none
    project_jdk: str | None = None

    def module_root(self) -> Path | None:
        if self.workspace is None:
            return None
        if self.module_dir:
            return self.workspace / self.module_dir
        return self.workspace


@dataclass
class BuildInfo:
    """Link to the analysis result, attached to the build."""

    installation_name: str
    url: str | None = None


@dataclass
class StepResult:
    success: bool
    exit_code: int | None
    build_info: BuildInfo | None = None
