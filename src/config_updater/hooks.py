"""Operator hook execution.

Hooks are plain executables at well-known paths. They receive no
arguments; the only guaranteed addition to the inherited environment is
``CONFIG_PATH``. Hooks run with the updater's full privileges and without a
timeout.
"""

from __future__ import annotations

import asyncio
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from config_updater.errors import HookFailure
from config_updater.logging import get_logger

log = get_logger("config_updater.hooks")


@dataclass(frozen=True)
class HookResult:
    """Outcome of a single hook invocation."""

    hook_path: str
    success: bool
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""

    @property
    def detail(self) -> str:
        """Failure detail: captured stderr, falling back to the exit status."""
        text = self.stderr.strip()
        if text:
            return text
        if self.returncode is not None:
            return f"exit status {self.returncode}"
        return "unknown error"

    def raise_for_status(self) -> None:
        """Raise ``HookFailure`` if the hook did not succeed."""
        if not self.success:
            raise HookFailure(self.hook_path, self.detail, self.returncode)


def is_executable(hook_path: str | Path) -> bool:
    """Advisory check for an execute bit; always True on Windows."""
    if os.name == "nt":
        return True
    try:
        mode = os.stat(hook_path).st_mode
    except OSError:
        return False
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


class HookRunner:
    """Runs hook executables and classifies their outcome."""

    async def run_if_present(self, hook_path: str, config_path: str) -> HookResult | None:
        """Run *hook_path* if it exists; return None when there is no hook."""
        if not Path(hook_path).exists():
            log.debug("hook_not_present", hook=hook_path)
            return None
        return await self.run(hook_path, config_path)

    async def run(self, hook_path: str, config_path: str) -> HookResult:
        """Run *hook_path* with ``CONFIG_PATH`` set and wait for it to exit."""
        if not is_executable(hook_path):
            log.warning(
                "hook_not_executable",
                hook=hook_path,
                hint=f"run 'chmod +x {hook_path}' on the host and restart the container",
            )

        env = {**os.environ, "CONFIG_PATH": config_path}
        log.debug("hook_starting", hook=hook_path)
        try:
            proc = await asyncio.create_subprocess_exec(
                hook_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            log.error("hook_spawn_failed", hook=hook_path, error=str(exc))
            return HookResult(
                hook_path=hook_path,
                success=False,
                stderr=f"failed to execute hook: {exc}",
            )

        result = HookResult(
            hook_path=hook_path,
            success=proc.returncode == 0,
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

        if result.success:
            if result.stdout.strip():
                log.info("hook_output", hook=hook_path, output=result.stdout.strip())
        else:
            log.warning(
                "hook_failed",
                hook=hook_path,
                rc=result.returncode,
                stderr=result.stderr[:500],
            )
        return result
