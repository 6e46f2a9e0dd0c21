"""Logging bootstrap for the command-line client.

Configures the root logger so every ``logging.getLogger(__name__)`` call
emits to **stderr** (stdout is reserved for the answer) either:

* **Human-readable** (``json_output=False``, default) lines.
* **JSON lines** (``json_output=True``) for piping into log tooling.
"""

from __future__ import annotations

import logging
import sys

from kysy.configs.system import LoggingConfig

_PLAIN_FORMAT = "%(levelname)s %(asctime)s %(name)s  %(message)s"
_PLAIN_DATEFMT = "%H:%M:%S"


def setup_logging(config: LoggingConfig | None = None, *, debug: bool = False) -> None:
    """Configure the root logger (call once, before any work)."""
    if config is None:
        config = LoggingConfig()

    level = logging.DEBUG if debug else config.level
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)

    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        formatter: logging.Formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
        )
    else:
        formatter = logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_PLAIN_DATEFMT)

    handler.setFormatter(formatter)

    root.handlers = [handler]

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
