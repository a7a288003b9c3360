import logging
import os
from dataclasses import dataclass

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Config:
    log_format: str = "json"
    log_level: int = logging.INFO
    metrics_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        log_format = os.environ.get("ECS_CHECK_LOG_FORMAT", "json").strip().lower()
        if log_format not in ("json", "text"):
            raise RuntimeError(
                f"ECS_CHECK_LOG_FORMAT must be 'json' or 'text', got {log_format!r}"
            )

        level_name = os.environ.get("ECS_CHECK_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise RuntimeError(f"ECS_CHECK_LOG_LEVEL is not a log level: {level_name!r}")

        metrics_raw = os.environ.get("ECS_CHECK_METRICS", "1").strip().lower()

        return cls(
            log_format=log_format,
            log_level=level,
            metrics_enabled=metrics_raw not in _FALSE_VALUES,
        )
