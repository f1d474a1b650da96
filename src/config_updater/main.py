"""Main entry point for the config updater."""

import asyncio
import os
import sys
import traceback
from types import TracebackType

from config_updater import __version__
from config_updater.config import Settings, load_settings
from config_updater.errors import ConfigError
from config_updater.logging import get_logger, setup_logging
from config_updater.scheduler import Scheduler

EXIT_CONFIG_ERROR = 1
EXIT_LOOP_TERMINATED = 2
EXIT_INTERRUPTED = 130


def _crash_hook(
    exc_type: type[BaseException],
    exc: BaseException,
    tb: TracebackType | None,
) -> None:
    """Report an uncaught exception on stderr, even if logging is broken."""
    print("!!! config updater crashed !!!", file=sys.stderr)
    print(f"error: {exc_type.__name__}: {exc}", file=sys.stderr)
    frames = traceback.extract_tb(tb)
    if frames:
        last = frames[-1]
        print(f"location: {last.filename}:{last.lineno} in {last.name}", file=sys.stderr)
    sys.stderr.flush()


def install_crash_hook() -> None:
    """Route uncaught exceptions through ``_crash_hook``."""
    sys.excepthook = _crash_hook


def _report_config_error(exc: ConfigError) -> None:
    print(f"\nerror: {exc}\n", file=sys.stderr)
    print("common fixes:", file=sys.stderr)
    print("  1. make sure the SUB_URL environment variable is set", file=sys.stderr)
    print("  2. check the URL format (must start with http:// or https://)", file=sys.stderr)


async def run_updater(settings: Settings) -> None:
    """Run the update loop for *settings*."""
    await Scheduler(settings).run_forever()


def main() -> int:
    """Bootstrap logging and settings, then run the loop.

    Returns a process exit code; the loop itself never returns normally.
    """
    # Written before logging is configured so something reaches stderr
    # even if setup fails.
    print(f"config updater v{__version__} starting...", file=sys.stderr)
    install_crash_hook()

    setup_logging()
    log = get_logger("config_updater.main")
    log.info("config_updater_starting", version=__version__, pid=os.getpid())
    log.debug("environment", sub_url=os.environ.get("SUB_URL", "<unset>"))
    log.debug("environment", config_path=os.environ.get("CONFIG_PATH", "<unset>"))

    try:
        settings = load_settings()
    except ConfigError as exc:
        log.error("settings_load_failed", error=str(exc))
        _report_config_error(exc)
        return EXIT_CONFIG_ERROR

    log.info("settings_loaded")
    log.debug("settings", **settings.model_dump())

    try:
        asyncio.run(run_updater(settings))
    except KeyboardInterrupt:
        log.info("shutdown_requested")
        return EXIT_INTERRUPTED
    except Exception:
        log.exception("update_loop_crashed")
        print("error: update loop terminated unexpectedly", file=sys.stderr)
        return EXIT_LOOP_TERMINATED

    log.critical("update_loop_exited")
    print("error: update loop exited unexpectedly", file=sys.stderr)
    return EXIT_LOOP_TERMINATED


def run() -> None:
    """Run the application."""
    sys.exit(main())


if __name__ == "__main__":
    run()
