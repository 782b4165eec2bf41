#!/usr/bin/env python3
"""Run the SonarQube Scanner as a build step.

Example:
    sonarstep --workspace . --installation default \\
        --project sonar-project.properties --properties "sonar.projectKey=demo"
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path

from pydantic import ValidationError

from sonarstep.core.config import settings
from sonarstep.core.containers import build_registry, build_step
from sonarstep.core.logging import setup_logging
from sonarstep.domain.models import BuildContext
from sonarstep.domain.schemas import StepConfig
from sonarstep.services.build_listener import BuildListener

logger = logging.getLogger(__name__)


def _parse_defines(pairs: list[str]) -> dict[str, str]:
    out = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {pair!r}")
        out[key] = value
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sonarstep", description="Run a SonarQube Scanner analysis")
    ap.add_argument("--workspace", default=".", help="Build workspace root")
    ap.add_argument("--module-dir", help="Workspace-relative directory the build runs in")
    ap.add_argument("--installations", help="Installations JSON file (default: $INSTALLATIONS_FILE)")
    ap.add_argument("--installation", default="", help="SonarQube server installation name")
    ap.add_argument("--scanner", default="", help="SonarQube Scanner installation name")
    ap.add_argument("--project", default="", help="Path to the project settings file")
    ap.add_argument("--properties", default="", help="Analysis properties in key=value lines")
    ap.add_argument("--properties-file", help="Read analysis properties from this file")
    ap.add_argument("--java-opts", default="", help="Value for SONAR_RUNNER_OPTS")
    ap.add_argument("--jdk", default="", help="JDK installation name")
    ap.add_argument("--project-jdk", help="JDK installation used when --jdk is not given")
    ap.add_argument("--task", default="", help="Scanner task to run")
    ap.add_argument("--additional-arguments", default="", help="Extra scanner command-line arguments")
    ap.add_argument("--build-id", default=None, help="Build identifier (default: random)")
    ap.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Build variable, may be repeated",
    )
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging()

    try:
        build_vars = _parse_defines(args.define)
    except argparse.ArgumentTypeError as e:
        ap.error(str(e))

    properties = args.properties
    if args.properties_file:
        try:
            properties = Path(args.properties_file).read_text(encoding="utf-8") + "\n" + properties
        except OSError as e:
            print(f"[sonarstep] cannot read properties file: {e}", file=sys.stderr)
            return 2

    try:
        registry = build_registry(Path(args.installations) if args.installations else None)
    except (ValidationError, ValueError) as e:
        print(f"[sonarstep] invalid installations file: {e}", file=sys.stderr)
        return 2

    config = StepConfig(
        installation_name=args.installation,
        sonar_scanner_name=args.scanner,
        project=args.project,
        properties=properties,
        java_opts=args.java_opts,
        jdk=args.jdk,
        task=args.task,
        additional_arguments=args.additional_arguments,
    )

    build_id = args.build_id or str(uuid.uuid4())
    build = BuildContext(
        build_id=build_id,
        workspace=Path(args.workspace).resolve(),
        module_dir=args.module_dir,
        build_vars=build_vars,
        project_jdk=args.project_jdk,
    )
    listener = BuildListener(
        log_path=Path(settings.DATA_DIR) / "builds" / build_id / "build.log",
        stream=sys.stdout,
    )

    logger.info("Starting scanner step", extra={"build_id": build_id})
    result = build_step(config, registry).perform(build, listener)

    if result.build_info and result.build_info.url:
        listener.info(f"Analysis result: {result.build_info.url}")
    listener.info("SUCCESS" if result.success else "FAILURE")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
