from __future__ import annotations

import json
import logging
import sys
from typing import Any

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    stdout is left alone so that command output stays machine readable.
    """
    if level.upper() not in LEVELS:
        raise ValueError(f"Invalid log level '{level}', must be one of {sorted(LEVELS)}")

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(LEVELS[level.upper()])
    root.addHandler(handler)
