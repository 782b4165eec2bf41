from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from sonarstep.core.config import settings
from sonarstep.core.util import run_cmd

logger = logging.getLogger(__name__)


class Launcher:
    """Runs a scanner command on the local machine, streaming output into the build log."""

    def __init__(self, is_unix: bool | None = None, timeout_sec: int | None = None):
        self.is_unix = os.name != "nt" if is_unix is None else is_unix
        self.timeout_sec = timeout_sec or settings.SCANNER_TIMEOUT_SEC

    def launch(self, args, env: Mapping[str, str], cwd: Path | None, listener) -> int:
        listener.write(f"$ {args.to_display()}")
        logger.info("Launching %s in %s", args.to_display(), cwd)
        r = run_cmd(args.to_list(), cwd=cwd, env=env, sink=listener.write, timeout_sec=self.timeout_sec)
        return r.exit_code
