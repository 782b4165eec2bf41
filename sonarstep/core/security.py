import logging
from typing import Iterable

MASK = "******"


def mask_value(text: str, secrets: Iterable[str]) -> str:
    for s in secrets:
        if s:
            text = text.replace(s, MASK)
    return text


class SecretMaskingFilter(logging.Filter):
    """Redact registered secrets from log records before any handler sees them."""

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self._secrets: set[str] = {s for s in secrets if s}

    def add(self, *secrets: str) -> None:
        self._secrets.update(s for s in secrets if s)

    def discard(self, *secrets: str) -> None:
        self._secrets.difference_update(secrets)

    def clear(self) -> None:
        self._secrets.clear()

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        record.msg = mask_value(record.getMessage(), self._secrets)
        record.args = None
        return True


secret_filter = SecretMaskingFilter()
