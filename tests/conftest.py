"""Shared fixtures for the config updater test suite."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from config_updater.config import Settings, get_logging_settings

_UPDATER_ENV_VARS = (
    "SUB_URL",
    "CONFIG_PATH",
    "UPDATE_INTERVAL",
    "MIN_CONFIG_SIZE",
    "USER_AGENT",
    "POST_UPDATE_HOOK",
    "ON_ERROR_HOOK",
    "LOG_LEVEL",
    "ENVIRONMENT",
)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests that run shell hook scripts on platforms without /bin/sh."""
    if os.name != "nt":
        return
    skip = pytest.mark.skip(reason="hook scripts require /bin/sh")
    for item in items:
        if "write_hook" in getattr(item, "fixturenames", ()):
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Keep the host environment out of settings and reset cached settings."""
    for name in _UPDATER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_logging_settings.cache_clear()
    yield
    get_logging_settings.cache_clear()


@pytest.fixture()
def write_hook() -> Callable[[Path, str], Path]:
    """Return a helper that writes an executable ``/bin/sh`` script."""

    def _write(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture()
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Return a factory for settings with every path under ``tmp_path``."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "sub_url": "https://example.test/c.yaml",
            "config_path": str(tmp_path / "config" / "config.yaml"),
            "min_config_size": 10,
            "update_interval": 60,
            "post_update_hook": str(tmp_path / "hooks" / "post-update"),
            "on_error_hook": str(tmp_path / "hooks" / "on-error"),
            "_env_file": None,
        }
        values.update(overrides)
        return Settings(**values)  # type: ignore[arg-type]

    return _make
