"""Update cycle: one fetch, compare, commit and hook pass.

Lifecycle:
1. Fetch the remote document
2. Reject payloads smaller than the configured minimum
3. Stop early when the payload matches the local file
4. Create the config directory if needed
5. Back up the current file (single generation)
6. Atomically write the new file
7. Run the post-update hook; restore the backup if it fails

Any failure stops the sequence and is reported as a FAILED outcome.
Nothing is retried here; the scheduler's next tick is the retry.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from config_updater.config import Settings
from config_updater.errors import HookFailure, SizeError, UpdaterError, describe_error
from config_updater.fetcher import Fetcher
from config_updater.hooks import HookRunner
from config_updater.logging import get_logger
from config_updater.store import ConfigStore

log = get_logger("config_updater.cycle")


class CycleStatus(Enum):
    """Status of an update cycle."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class CycleOutcome:
    """Result of one update cycle."""

    status: CycleStatus
    reason: str | None = None
    error: UpdaterError | None = None
    payload_size: int | None = None
    rolled_back: bool = False
    rollback_error: str | None = None
    steps_completed: list[str] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    completed_at: str | None = None
    duration_seconds: float | None = None

    @property
    def failed(self) -> bool:
        return self.status is CycleStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "payload_size": self.payload_size,
            "rolled_back": self.rolled_back,
            "rollback_error": self.rollback_error,
            "steps_completed": self.steps_completed,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_seconds": self.duration_seconds,
        }


class UpdateCycle:
    """Runs the fetch/compare/commit/hook sequence for one tick."""

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore | None = None,
        fetcher: Fetcher | None = None,
        hooks: HookRunner | None = None,
    ) -> None:
        self._settings = settings
        self._store = store or ConfigStore(settings.config_path)
        self._fetcher = fetcher or Fetcher()
        self._hooks = hooks or HookRunner()

    @property
    def store(self) -> ConfigStore:
        return self._store

    async def run(self) -> CycleOutcome:
        """Run one cycle to completion. Never raises ``Exception``."""
        start = time.monotonic()
        outcome = CycleOutcome(status=CycleStatus.FAILED)
        try:
            await self._run_steps(outcome)
        except UpdaterError as exc:
            outcome.status = CycleStatus.FAILED
            outcome.error = exc
            outcome.reason = describe_error(exc)
        except Exception as exc:
            log.exception("cycle_unexpected_error")
            outcome.status = CycleStatus.FAILED
            outcome.reason = f"unexpected error: {exc}"
        finally:
            outcome.duration_seconds = round(time.monotonic() - start, 3)
            outcome.completed_at = datetime.now(UTC).isoformat()
        return outcome

    async def _run_steps(self, outcome: CycleOutcome) -> None:
        settings = self._settings
        store = self._store

        payload = await self._fetcher.fetch(settings.sub_url, settings.user_agent)
        outcome.payload_size = len(payload)
        outcome.steps_completed.append("fetch")

        if len(payload) < settings.min_config_size:
            raise SizeError(len(payload), settings.min_config_size)
        outcome.steps_completed.append("size_validate")

        if not store.is_changed(payload):
            log.info("config_unchanged")
            outcome.status = CycleStatus.UNCHANGED
            return
        outcome.steps_completed.append("change_detect")

        store.ensure_directory()
        outcome.steps_completed.append("prepare_directory")

        store.backup()
        outcome.steps_completed.append("backup")

        store.commit(payload)
        outcome.steps_completed.append("commit")

        result = await self._hooks.run_if_present(settings.post_update_hook, str(store.path))
        if result is not None:
            try:
                result.raise_for_status()
            except HookFailure as exc:
                log.error("post_update_hook_failed", error=str(exc))
                self._rollback(outcome)
                raise
            outcome.steps_completed.append("post_hook")

        outcome.status = CycleStatus.UPDATED

    def _rollback(self, outcome: CycleOutcome) -> None:
        """Restore the previous config after a rejected update.

        A failed restore is logged and recorded; the managed file then keeps
        the new, rejected content.
        """
        try:
            self._store.restore_from_backup()
        except UpdaterError as exc:
            outcome.rollback_error = describe_error(exc)
            log.error("config_restore_failed", error=outcome.rollback_error)
            return
        outcome.rolled_back = True
        outcome.steps_completed.append("rollback")
