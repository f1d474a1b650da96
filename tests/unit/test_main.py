"""Unit tests for the process bootstrap in config_updater.main."""

from __future__ import annotations

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config_updater import main as main_module
from config_updater.errors import ConfigError


@pytest.fixture()
def _quiet_bootstrap():
    """Stub logging setup and restore the original excepthook afterwards."""
    original_hook = sys.excepthook
    with (
        patch("config_updater.main.setup_logging"),
        patch("config_updater.main.get_logger", return_value=MagicMock()),
    ):
        yield
    sys.excepthook = original_hook


@pytest.mark.usefixtures("_quiet_bootstrap")
class TestMain:
    """Tests for main() exit codes and diagnostics."""

    def test_config_error_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "config_updater.main.load_settings",
            side_effect=ConfigError("SUB_URL: environment variable is required"),
        ):
            code = main_module.main()

        err = capsys.readouterr().err
        assert code == main_module.EXIT_CONFIG_ERROR == 1
        assert "SUB_URL: environment variable is required" in err
        assert "common fixes" in err
        assert "http:// or https://" in err

    def test_prints_banner_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("config_updater.main.load_settings", side_effect=ConfigError("bad")):
            main_module.main()

        captured = capsys.readouterr()
        assert "starting" in captured.err
        assert captured.out == ""

    def test_loop_exit_is_abnormal(self, make_settings) -> None:
        with (
            patch("config_updater.main.load_settings", return_value=make_settings()),
            patch("config_updater.main.run_updater", new_callable=AsyncMock) as mock_run,
        ):
            code = main_module.main()

        mock_run.assert_awaited_once()
        assert code == main_module.EXIT_LOOP_TERMINATED

    def test_loop_crash_is_abnormal(self, make_settings) -> None:
        with (
            patch("config_updater.main.load_settings", return_value=make_settings()),
            patch(
                "config_updater.main.run_updater",
                new_callable=AsyncMock,
                side_effect=RuntimeError("loop died"),
            ),
        ):
            code = main_module.main()

        assert code == main_module.EXIT_LOOP_TERMINATED

    def test_keyboard_interrupt(self, make_settings) -> None:
        with (
            patch("config_updater.main.load_settings", return_value=make_settings()),
            patch("config_updater.main.run_updater", new_callable=MagicMock),
            patch("config_updater.main.asyncio.run", side_effect=KeyboardInterrupt),
        ):
            code = main_module.main()

        assert code == main_module.EXIT_INTERRUPTED

    def test_installs_crash_hook(self) -> None:
        with patch("config_updater.main.load_settings", side_effect=ConfigError("bad")):
            main_module.main()

        assert sys.excepthook is main_module._crash_hook


class TestCrashHook:
    """Tests for the uncaught-exception reporter."""

    def test_reports_type_message_and_location(self, capsys: pytest.CaptureFixture[str]) -> None:
        try:
            raise ValueError("broken invariant")
        except ValueError as exc:
            main_module._crash_hook(ValueError, exc, exc.__traceback__)

        err = capsys.readouterr().err
        assert "ValueError: broken invariant" in err
        assert "location:" in err
        assert "test_main.py" in err


class TestRun:
    """Tests for run()."""

    def test_exits_with_main_code(self) -> None:
        with patch("config_updater.main.main", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                main_module.run()
        assert exc_info.value.code == 1

    async def test_run_updater_drives_scheduler(self, make_settings) -> None:
        scheduler = MagicMock()
        scheduler.run_forever = AsyncMock()
        with patch("config_updater.main.Scheduler", return_value=scheduler) as mock_cls:
            settings = make_settings()
            await main_module.run_updater(settings)

        mock_cls.assert_called_once_with(settings)
        scheduler.run_forever.assert_awaited_once()
