from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import TextIO

from sonarstep.core.security import mask_value

logger = logging.getLogger(__name__)

LOG_PREFIX = "[SonarQube] "
_RULE = "-" * 72


class BuildListener:
    """
    The build log of one step run: appended to a file and optionally echoed to a stream.
    """

    def __init__(self, log_path: Path | None = None, stream: TextIO | None = None):
        self.log_path = log_path
        self.stream = stream
        self._secrets: set[str] = set()
        self._lines: list[str] = []
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    def add_secrets(self, *secrets: str) -> None:
        self._secrets.update(s for s in secrets if s)

    def write(self, line: str) -> None:
        line = mask_value(line, self._secrets)
        self._lines.append(line)
        if self.log_path is not None:
            with self.log_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        if self.stream is not None:
            self.stream.write(line + "\n")
            self.stream.flush()

    def info(self, msg: str) -> None:
        self.write(LOG_PREFIX + msg)

    def fatal_error(self, msg: str) -> None:
        logger.error(msg)
        self.write("ERROR: " + msg)

    def print_failure_message(self) -> None:
        self.write(_RULE)
        self.write("SONAR ANALYSIS FAILED")
        self.write(_RULE)

    def print_exception(self, exc: BaseException) -> None:
        for chunk in traceback.format_exception(type(exc), exc, exc.__traceback__):
            for line in chunk.rstrip("\n").splitlines():
                self.write(line)

    def read_log(self) -> str:
        if self.log_path is not None and self.log_path.exists():
            return self.log_path.read_text(encoding="utf-8")
        return "\n".join(self._lines)
