from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, field_validator

from sonarstep.core.util import expand_vars


class SonarInstallation(BaseModel):
    name: str
    server_url: str = "http://localhost:9000"

    # Legacy direct database access (pre-5.2 servers)
    database_url: str = ""
    database_login: str = ""
    database_password: str = ""

    sonar_login: str = ""
    sonar_password: str = ""
    server_authentication_token: str = ""

    # Extra scanner CLI text, e.g. "-X"
    additional_properties: str = ""
    # Whitespace-separated key=value pairs passed as -D flags
    additional_analysis_properties: str = ""

    disabled: bool = False

    @field_validator(
        "server_url",
        "database_url",
        "database_login",
        "database_password",
        "sonar_login",
        "sonar_password",
        "server_authentication_token",
        "additional_properties",
        "additional_analysis_properties",
        mode="before",
    )
    @classmethod
    def _fix_null(cls, v):
        return "" if v is None else v

    def additional_analysis_properties_unix(self) -> list[str]:
        return [f"-D{p}" for p in self.additional_analysis_properties.split() if p]

    def secrets(self) -> list[str]:
        return [
            s
            for s in (
                self.database_password,
                self.sonar_password,
                self.server_authentication_token,
            )
            if s
        ]


class ScannerInstallation(BaseModel):
    name: str
    home: str

    def resolved_home(self, env: Mapping[str, str]) -> str:
        return expand_vars(self.home, env)

    def executable(self, is_unix: bool, env: Mapping[str, str]) -> str | None:
        """Locate the scanner launch script under ``<home>/bin``.

        ``sonar-scanner`` is preferred; ``sonar-runner`` is the name used by
        scanner releases before 2.5.
        """
        bin_dir = Path(self.resolved_home(env)) / "bin"
        suffix = "" if is_unix else ".bat"
        for name in ("sonar-scanner", "sonar-runner"):
            exe = bin_dir / f"{name}{suffix}"
            if exe.is_file():
                return str(exe)
        return None


class JdkInstallation(BaseModel):
    name: str
    home: str

    def build_env(self, env: dict[str, str]) -> None:
        env["JAVA_HOME"] = self.home
        bin_dir = str(Path(self.home) / "bin")
        current = env.get("PATH")
        env["PATH"] = bin_dir + os.pathsep + current if current else bin_dir


class InstallationsConfig(BaseModel):
    sonar: list[SonarInstallation] = []
    scanners: list[ScannerInstallation] = []
    jdks: list[JdkInstallation] = []


class StepConfig(BaseModel):
    """Job-level settings of one scanner build step."""

    installation_name: str = ""
    sonar_scanner_name: str = ""
    # Path to a project settings file, relative to the module root or workspace
    project: str = ""
    # key=value lines in .properties syntax
    properties: str = ""
    java_opts: str = ""
    jdk: str = ""
    task: str = ""
    additional_arguments: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _fix_null(cls, v):
        return "" if v is None else v
