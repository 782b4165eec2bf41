from __future__ import annotations

import shlex

from sonarstep.core.security import MASK


class ArgumentList:
    """Ordered command-line arguments, some of which are masked when displayed."""

    def __init__(self, *args: str):
        self._args: list[str] = []
        self._mask: list[bool] = []
        self.add(*args)

    def add(self, *args: str) -> "ArgumentList":
        for a in args:
            self._args.append(a)
            self._mask.append(False)
        return self

    def add_masked(self, arg: str) -> "ArgumentList":
        self._args.append(arg)
        self._mask.append(True)
        return self

    def add_tokenized(self, text: str | None) -> "ArgumentList":
        if text and text.strip():
            self.add(*shlex.split(text))
        return self

    def count(self, arg: str) -> int:
        return self._args.count(arg)

    def remove_extra(self, arg: str) -> None:
        """Keep only the first occurrence of ``arg``."""
        seen = False
        args, mask = [], []
        for a, m in zip(self._args, self._mask):
            if a == arg:
                if seen:
                    continue
                seen = True
            args.append(a)
            mask.append(m)
        self._args, self._mask = args, mask

    def to_list(self) -> list[str]:
        return list(self._args)

    def to_display(self) -> str:
        shown = []
        for a, m in zip(self._args, self._mask):
            if m:
                a = a.split("=", 1)[0] + "=" + MASK if "=" in a else MASK
            shown.append(a)
        return shlex.join(shown)

    def __len__(self) -> int:
        return len(self._args)


class PropertyArguments:
    """Appends ``-Dkey=value`` scanner properties to an :class:`ArgumentList`."""

    def __init__(self, args: ArgumentList):
        self.args = args

    def append(self, key: str, value: str | None) -> None:
        if value:
            self.args.add(f"-D{key}={value}")

    def append_masked(self, key: str, value: str | None) -> None:
        if value:
            self.args.add_masked(f"-D{key}={value}")
