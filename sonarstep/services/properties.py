"""Parser for ``.properties`` text as typed into the job configuration.

Follows the java.util.Properties line format: ``#``/``!`` comments,
``=``, ``:`` or whitespace separators, backslash line continuations and
backslash escapes (including ``\\uXXXX``).
"""

from __future__ import annotations

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_HEX = "0123456789abcdefABCDEF"


def _logical_lines(text: str):
    buf = ""
    continuing = False
    for raw in text.splitlines():
        line = raw.lstrip(_WHITESPACE)
        if not continuing and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf += line[:-1]
            continuing = True
            continue
        yield buf + line
        buf = ""
        continuing = False
    if buf:
        yield buf


def _unescape(s: str) -> str:
    out = []
    i = 0
    while i < len(s):
        c = s[i]
        if c != "\\" or i + 1 >= len(s):
            out.append(c)
            i += 1
            continue
        nxt = s[i + 1]
        if nxt == "u":
            digits = s[i + 2 : i + 6]
            if len(digits) != 4 or any(d not in _HEX for d in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: {s[i:i + 6]!r}")
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split(line: str) -> tuple[str, str]:
    i = 0
    n = len(line)
    while i < n:
        c = line[i]
        if c == "\\":
            i += 2
            continue
        if c in _SEPARATORS or c in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(text: str | None) -> dict[str, str]:
    props: dict[str, str] = {}
    if not text:
        return props
    for line in _logical_lines(text):
        line = line.lstrip(_WHITESPACE)
        if not line:
            continue
        key, value = _split(line)
        props[_unescape(key)] = _unescape(value)
    return props
