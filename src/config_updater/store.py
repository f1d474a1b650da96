"""Local storage for the managed configuration file.

The store owns two paths: the managed file itself and a single backup
generation at ``<path>.bak``. New content is written through a temporary
file in the same directory and moved into place with ``os.replace`` so a
reader never observes a half-written config.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from config_updater.errors import BackupMissingError, ConfigIOError
from config_updater.fingerprint import fingerprint, short_fingerprint
from config_updater.logging import get_logger

log = get_logger("config_updater.store")


class ConfigStore:
    """Reads, writes, backs up and restores the managed config file."""

    def __init__(self, config_path: str | Path) -> None:
        self._path = Path(config_path)
        self._backup_path = self._path.with_name(f"{self._path.name}.bak")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self._path.is_file()

    def read(self) -> bytes:
        """Return the current contents of the managed file."""
        try:
            return self._path.read_bytes()
        except OSError as exc:
            raise ConfigIOError(f"failed to read current config {self._path}") from exc

    def is_changed(self, new_data: bytes) -> bool:
        """Return True when *new_data* should replace the local file.

        A missing or empty local file always counts as changed, so a first
        run or a truncated file triggers a write.
        """
        if not self.exists():
            return True

        current = self.read()
        if not current:
            return True

        current_hash = fingerprint(current)
        new_hash = fingerprint(new_data)
        if current_hash == new_hash:
            return False

        log.info(
            "config_changed",
            old=short_fingerprint(current_hash),
            new=short_fingerprint(new_hash),
        )
        return True

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def ensure_directory(self) -> None:
        """Create any missing parent directories of the managed file."""
        parent = self._path.parent
        if parent.is_dir():
            return
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigIOError(f"failed to create config directory {parent}") from exc
        log.debug("config_directory_created", path=str(parent))

    def backup(self) -> Path | None:
        """Copy the managed file to the backup path, if it exists.

        Overwrites any previous backup. Returns the backup path, or None when
        there was nothing to back up.
        """
        if not self.exists():
            return None
        try:
            shutil.copy(self._path, self._backup_path)
        except OSError as exc:
            raise ConfigIOError(f"failed to back up config to {self._backup_path}") from exc
        log.debug("config_backed_up", backup=str(self._backup_path))
        return self._backup_path

    def commit(self, new_data: bytes) -> None:
        """Atomically replace the managed file with *new_data*."""
        tmp_path = self._path.with_name(f".{self._path.name}.tmp")
        try:
            with open(tmp_path, "wb") as fh:
                fh.write(new_data)
                fh.flush()
                os.fsync(fh.fileno())
            if self.exists():
                shutil.copymode(self._path, tmp_path)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise ConfigIOError(f"failed to write new config {self._path}") from exc
        log.info("config_updated", path=str(self._path), bytes=len(new_data))

    def restore_from_backup(self) -> None:
        """Copy the backup generation back over the managed file.

        Raises:
            BackupMissingError: If no backup file exists.
            ConfigIOError: If the copy fails.
        """
        if not self._backup_path.is_file():
            raise BackupMissingError(f"backup file not found: {self._backup_path}")
        try:
            shutil.copyfile(self._backup_path, self._path)
        except OSError as exc:
            raise ConfigIOError(f"failed to restore config from {self._backup_path}") from exc
        log.warning("config_restored_from_backup", path=str(self._path))
