"""
confmend - filesystem utilities

File: src/confmend/utils/fs.py

Purpose
- Provide the single durable-write primitive used by every write path, plus the
  sibling-path helpers it relies on.

Functional requirements
- ``durable_write`` snapshots the current file to ``P.backup``, stages the new
  content in ``P.tmp``, and commits with one ``os.replace``.
- On failure the primary is restored from the backup when it has gone missing,
  and a dangling ``P.tmp`` is always removed before the error propagates.

Non-functional requirements
- Standard library only; the staging file lives beside the target so the
  rename never crosses filesystems.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import structlog

from confmend.constants import BACKUP_SUFFIX, TEMP_SUFFIX

PathLike = str | os.PathLike[str]

_logger = structlog.get_logger(__name__)

__all__ = [
    "backup_path_for",
    "durable_write",
    "restore_from_backup",
    "temp_path_for",
]


def backup_path_for(path: PathLike) -> Path:
    target = Path(path)
    return target.with_name(target.name + BACKUP_SUFFIX)


def temp_path_for(path: PathLike) -> Path:
    target = Path(path)
    return target.with_name(target.name + TEMP_SUFFIX)


def durable_write(path: PathLike, data: str, *, encoding: str = "utf-8") -> None:
    """
    Durably replace ``path`` with ``data``.

    The write strategy is:
    1. copy an existing ``path`` to ``path.backup`` (best effort),
    2. write + flush + fsync ``path.tmp``,
    3. ``os.replace(path.tmp, path)``, the only commit point,
    4. remove ``path.backup``.

    Any exception after the snapshot re-raises unchanged once rollback and
    temp cleanup have been attempted.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    backup_path = backup_path_for(target)
    temp_path = temp_path_for(target)

    if target.exists():
        try:
            shutil.copy2(target, backup_path)
        except OSError as exc:
            _logger.warning(
                "config_backup_failed",
                path=str(target),
                backup_path=str(backup_path),
                error=str(exc),
            )

    try:
        with open(temp_path, "w", encoding=encoding, newline="\n") as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except BaseException:
        if backup_path.exists() and not target.exists():
            restore_from_backup(target)
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                _logger.warning(
                    "config_temp_cleanup_failed",
                    path=str(temp_path),
                    error=str(cleanup_exc),
                )
        raise

    try:
        backup_path.unlink(missing_ok=True)
    except OSError as exc:
        _logger.warning("config_backup_cleanup_failed", path=str(backup_path), error=str(exc))


def restore_from_backup(path: PathLike) -> bool:
    """Copy ``path.backup`` over ``path``; return ``False`` (logged) when the copy fails."""

    target = Path(path)
    backup_path = backup_path_for(target)
    try:
        shutil.copy2(backup_path, target)
    except OSError as exc:
        _logger.error(
            "config_backup_restore_failed",
            path=str(target),
            backup_path=str(backup_path),
            error=str(exc),
        )
        return False
    _logger.warning("config_restored_from_backup", path=str(target))
    return True


def _fsync_directory(path: Path) -> None:
    """Flush the directory entry so the rename survives a crash; skipped where unsupported."""

    if os.name == "nt":
        return

    try:
        dir_fd = os.open(path, os.O_RDONLY | getattr(os, "O_DIRECTORY", 0))
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError as exc:
        _logger.debug("config_directory_fsync_skipped", path=str(path), error=str(exc))
    finally:
        os.close(dir_fd)
