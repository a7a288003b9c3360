"""Log formatting for check runs.

ECS_CHECK_LOG_FORMAT selects "json" (default) or "text". Both formats carry
the check_* extras the evaluator attaches (check name, instance, policy).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

EXTRA_PREFIX = "check_"


def check_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the check_* extras of a record, without the prefix."""
    return {
        key[len(EXTRA_PREFIX):]: value
        for key, value in record.__dict__.items()
        if key.startswith(EXTRA_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = check_extras(record)
        if extras:
            entry["check"] = extras

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plaintext lines with check extras appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        extras = check_extras(record)
        if extras:
            pairs = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
            line = f"{line} [{pairs}]"
        return line


def setup_logging(log_format: str, level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Route all logging through one handler with the chosen format."""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicate output
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    root.addHandler(handler)
