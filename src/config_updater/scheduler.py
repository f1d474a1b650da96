"""Fixed-interval driver for the update cycle."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from config_updater.config import Settings
from config_updater.cycle import CycleOutcome, CycleStatus, UpdateCycle
from config_updater.hooks import HookRunner
from config_updater.logging import get_logger

log = get_logger("config_updater.scheduler")

SleepFunc = Callable[[float], Awaitable[object]]


class Scheduler:
    """Runs one update cycle per interval, forever.

    The first cycle runs immediately. After each cycle the scheduler waits
    the full interval, so a slow cycle delays the next one rather than
    causing a burst of catch-up ticks. Cycles never overlap.
    """

    def __init__(
        self,
        settings: Settings,
        cycle: UpdateCycle | None = None,
        hooks: HookRunner | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._hooks = hooks or HookRunner()
        self._cycle = cycle or UpdateCycle(settings, hooks=self._hooks)
        self._sleep = sleep
        self._iteration = 0

    @property
    def iteration(self) -> int:
        return self._iteration

    async def run_forever(self) -> None:
        """Run cycles until the process is stopped. Does not return."""
        log.info(
            "updater_started",
            sub_url=self._settings.sub_url,
            config_path=self._settings.config_path,
            interval_seconds=self._settings.update_interval,
        )
        while True:
            await self.run_once()
            await self._sleep(self._settings.update_interval)

    async def run_once(self) -> CycleOutcome:
        """Run a single iteration: the cycle plus the error hook on failure."""
        self._iteration += 1
        iteration = self._iteration

        try:
            outcome = await self._cycle.run()
        except Exception as exc:
            log.exception("cycle_crashed", iteration=iteration)
            outcome = CycleOutcome(status=CycleStatus.FAILED, reason=f"unexpected error: {exc}")

        if outcome.failed:
            log.error("update_failed", iteration=iteration, **outcome.to_dict())
            await self._run_error_hook()
        else:
            log.debug("update_check_complete", iteration=iteration, **outcome.to_dict())
        return outcome

    async def _run_error_hook(self) -> None:
        try:
            result = await self._hooks.run_if_present(
                self._settings.on_error_hook, self._settings.config_path
            )
        except Exception:
            log.exception("error_hook_crashed", hook=self._settings.on_error_hook)
            return
        if result is not None and not result.success:
            log.error("error_hook_failed", hook=result.hook_path, error=result.detail)
