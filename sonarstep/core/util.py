import re
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

_VAR = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_.]*)\}|(?P<plain>[A-Za-z_][A-Za-z0-9_]*))")


@dataclass
class CmdResult:
    exit_code: int
    output: str


def expand_vars(text: str | None, env: Mapping[str, str]) -> str:
    """Expand ``$VAR`` and ``${VAR}`` from ``env``; unknown variables are kept as written."""
    if not text:
        return ""

    def _sub(m: re.Match) -> str:
        name = m.group("braced") or m.group("plain")
        return env.get(name, m.group(0))

    return _VAR.sub(_sub, text)


def run_cmd(
    cmd: Sequence[str],
    cwd: Path | None,
    env: Mapping[str, str] | None = None,
    sink: Callable[[str], None] | None = None,
    timeout_sec: int = 60,
) -> CmdResult:
    """Run ``cmd`` to completion, streaming merged stdout/stderr line by line to ``sink``.

    OSError from the launch itself is left to the caller.
    """
    p = subprocess.Popen(
        list(cmd),
        cwd=str(cwd) if cwd else None,
        env=dict(env) if env is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
    )

    timed_out = []

    def _kill() -> None:
        timed_out.append(True)
        p.kill()

    timer = threading.Timer(timeout_sec, _kill)
    timer.start()
    lines: list[str] = []
    try:
        for line in p.stdout:
            line = line.rstrip("\r\n")
            lines.append(line)
            if sink:
                sink(line)
        exit_code = p.wait()
    finally:
        timer.cancel()
        p.stdout.close()

    if timed_out:
        raise subprocess.TimeoutExpired(list(cmd), timeout_sec, output="\n".join(lines))
    return CmdResult(exit_code, "\n".join(lines))
