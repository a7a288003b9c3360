from __future__ import annotations

import logging

import pytest

from ecs_check.app import App
from ecs_check.config import Config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ECS_CHECK_LOG_FORMAT", "ECS_CHECK_LOG_LEVEL", "ECS_CHECK_METRICS"):
        monkeypatch.delenv(name, raising=False)


def test_config_from_env_defaults() -> None:
    cfg = Config.from_env()
    assert cfg == Config(log_format="json", log_level=logging.INFO, metrics_enabled=True)


def test_config_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ECS_CHECK_LOG_FORMAT", "TEXT")
    monkeypatch.setenv("ECS_CHECK_LOG_LEVEL", "debug")
    monkeypatch.setenv("ECS_CHECK_METRICS", "off")

    cfg = Config.from_env()
    assert cfg.log_format == "text"
    assert cfg.log_level == logging.DEBUG
    assert cfg.metrics_enabled is False


def test_config_from_env_rejects_unknown_format(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ECS_CHECK_LOG_FORMAT", "xml")
    with pytest.raises(RuntimeError, match="ECS_CHECK_LOG_FORMAT"):
        Config.from_env()


def test_config_from_env_rejects_unknown_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ECS_CHECK_LOG_LEVEL", "loud")
    with pytest.raises(RuntimeError, match="not a log level"):
        Config.from_env()


def test_app_from_env_applies_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ECS_CHECK_LOG_FORMAT", "text")
    monkeypatch.setenv("ECS_CHECK_METRICS", "0")

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        app = App.from_env()
        assert app.config.log_format == "text"
        assert app.metrics.enabled is False
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
