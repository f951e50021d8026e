"""Logging setup for feeledger.

Modules obtain loggers through ``get_logger`` so everything lives under the
``feeledger`` namespace. Structured fields are passed with ``extra=`` and
rendered after the message as ``key=value`` pairs.
"""

import logging
import sys
from typing import Any

ROOT_LOGGER_NAME = "feeledger"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class KeyValueFormatter(logging.Formatter):
    """Formatter appending ``extra`` fields to the message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _STDLIB_KEYS and not key.startswith("_")
        }
        if not fields:
            return base
        rendered = " ".join(f"{key}={_render(value)}" for key, value in sorted(fields.items()))
        return f"{base} {rendered}"


class _StderrHandler(logging.StreamHandler):
    """StreamHandler writing to whatever sys.stderr is at emit time."""

    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def _render(value: Any) -> str:
    text = str(value)
    if " " in text:
        return repr(text)
    return text


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``feeledger`` namespace.

    Args:
        name: Dotted suffix (``"domain.recorder"``) or a full module name
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a stderr handler to the ``feeledger`` logger.

    Calling it again only changes the level; handlers are not duplicated.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not any(getattr(h, "_feeledger_handler", False) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(
            KeyValueFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handler._feeledger_handler = True
        logger.addHandler(handler)
    return logger
