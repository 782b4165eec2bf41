from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path

from sonarstep.core.launcher import Launcher
from sonarstep.core.security import secret_filter
from sonarstep.core.util import expand_vars
from sonarstep.domain.installations import InstallationRegistry
from sonarstep.domain.models import BuildContext, StepResult
from sonarstep.domain.schemas import ScannerInstallation, SonarInstallation, StepConfig
from sonarstep.services.analysis_link import add_build_info
from sonarstep.services.arguments import ArgumentList, PropertyArguments
from sonarstep.services.build_listener import BuildListener
from sonarstep.services.properties import parse_properties

logger = logging.getLogger(__name__)

EXEC_FAILED = "SonarQube Scanner execution failed"
GLOBAL_CONFIG_NEEDED = " Maybe you need to configure a SonarQube Scanner installation?"


class ScannerStep:
    """
    One SonarQube Scanner build step: validate installations → build arguments
    and environment → run the scanner in the module root → attach the result link.
    """

    def __init__(
        self,
        config: StepConfig,
        registry: InstallationRegistry,
        launcher: Launcher | None = None,
    ):
        self.config = config
        self.registry = registry
        self.launcher = launcher or Launcher()

    def sonar_installation(self) -> SonarInstallation | None:
        return self.registry.sonar(self.config.installation_name)

    def scanner_installation(self) -> ScannerInstallation | None:
        return self.registry.scanner(self.config.sonar_scanner_name)

    def perform(self, build: BuildContext, listener: BuildListener) -> StepResult:
        failure = self.registry.validation_message(self.config.installation_name)
        if failure:
            listener.print_failure_message()
            listener.fatal_error(failure)
            return StepResult(success=False, exit_code=None)

        sonar_inst = self.sonar_installation()
        secrets = sonar_inst.secrets()
        listener.add_secrets(*secrets)
        secret_filter.add(*secrets)
        try:
            return self._run_scanner(sonar_inst, build, listener)
        finally:
            secret_filter.discard(*secrets)

    def _run_scanner(
        self, sonar_inst: SonarInstallation, build: BuildContext, listener: BuildListener
    ) -> StepResult:
        args = ArgumentList()
        env = dict(os.environ)
        env.update(build.build_vars)

        sri = self.scanner_installation()
        if sri is None:
            args.add("sonar-runner" if self.launcher.is_unix else "sonar-runner.bat")
        else:
            exe = sri.executable(self.launcher.is_unix, env)
            if exe is None:
                listener.print_failure_message()
                listener.fatal_error(f"Cannot find SonarQube Scanner executable for installation '{sri.name}'")
                return StepResult(success=False, exit_code=None)
            args.add(exe)
            env["SONAR_RUNNER_HOME"] = sri.resolved_home(env)

        self.add_task_argument(args)
        self.add_additional_arguments(args, sonar_inst)
        if not self.populate_configuration(PropertyArguments(args), build, listener, env, sonar_inst):
            return StepResult(success=False, exit_code=None)

        self.compute_jdk(build, env)
        env["SONAR_RUNNER_OPTS"] = self.config.java_opts

        start = time.monotonic()
        try:
            exit_code = self.launcher.launch(args, env, build.module_root(), listener)
        except (OSError, subprocess.TimeoutExpired) as e:
            self.handle_errors(listener, sri, start, e)
            exit_code = -1

        logger.info(
            "Scanner finished with exit code %d",
            exit_code,
            extra={"build_id": build.build_id},
        )
        info = add_build_info(listener, sonar_inst.name)
        return StepResult(success=exit_code == 0, exit_code=exit_code, build_info=info)

    def handle_errors(
        self,
        listener: BuildListener,
        sri: ScannerInstallation | None,
        start: float,
        exc: BaseException,
    ) -> None:
        listener.print_failure_message()
        message = EXEC_FAILED
        if sri is None and time.monotonic() - start < 1 and not self.registry.scanner_installations():
            # Default command failed right away and nothing is configured
            message += GLOBAL_CONFIG_NEEDED
        listener.fatal_error(message)
        listener.print_exception(exc)

    def add_task_argument(self, args: ArgumentList) -> None:
        if self.config.task.strip():
            args.add(self.config.task)

    def add_additional_arguments(self, args: ArgumentList, inst: SonarInstallation) -> None:
        args.add_tokenized(inst.additional_properties)
        args.add(*inst.additional_analysis_properties_unix())
        args.add_tokenized(self.config.additional_arguments)

        if args.count("-e") == 0:
            args.add("-e")
        else:
            args.remove_extra("-e")

    def populate_configuration(
        self,
        props: PropertyArguments,
        build: BuildContext,
        listener: BuildListener,
        env: dict[str, str],
        si: SonarInstallation | None,
    ) -> bool:
        if si is not None:
            props.append("sonar.jdbc.url", si.database_url)
            props.append_masked("sonar.jdbc.username", si.database_login)
            props.append_masked("sonar.jdbc.password", si.database_password)
            props.append("sonar.host.url", si.server_url)
            if si.server_authentication_token.strip():
                props.append_masked("sonar.login", si.server_authentication_token)
            elif si.sonar_login.strip():
                props.append_masked("sonar.login", si.sonar_login)
                props.append_masked("sonar.password", si.sonar_password)

        if self.config.project.strip():
            settings_file = self.resolve_project_settings(
                expand_vars(self.config.project, env), build, listener
            )
            if settings_file is None:
                return False
            props.append("project.settings", str(settings_file))

        try:
            p = parse_properties(expand_vars(self.config.properties, env))
        except ValueError as e:
            listener.print_failure_message()
            listener.fatal_error(f"Invalid analysis properties: {e}")
            return False
        for key, value in p.items():
            props.append(key, value)

        if "sonar.projectBaseDir" not in p and build.module_root() is not None:
            props.append("sonar.projectBaseDir", str(build.module_root()))

        return True

    @staticmethod
    def resolve_project_settings(
        project_settings: str, build: BuildContext, listener: BuildListener
    ) -> Path | None:
        """Find the project settings file under the module root, then under the workspace root."""
        module_root = build.module_root()
        if module_root is not None:
            candidate = module_root / project_settings
            if candidate.exists():
                return candidate.resolve()
        else:
            candidate = Path(project_settings)

        # Users often give the path relative to the workspace rather than the module root
        if build.workspace is None:
            listener.fatal_error("Project workspace is null")
            return None
        fallback = build.workspace / project_settings
        if fallback.exists():
            return fallback.resolve()

        listener.fatal_error(f"Unable to find Sonar project settings at {candidate}")
        return None

    def compute_jdk(self, build: BuildContext, env: dict[str, str]) -> None:
        jdk = self.registry.jdk(self.config.jdk) or self.registry.jdk(build.project_jdk)
        if jdk is not None:
            jdk.build_env(env)
