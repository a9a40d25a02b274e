"""Utility exports for durable filesystem writes and bounded concurrency."""

from confmend.utils.concurrency import BoundedSemaphore, gather_bounded
from confmend.utils.fs import backup_path_for, durable_write, restore_from_backup, temp_path_for

__all__ = [
    "BoundedSemaphore",
    "backup_path_for",
    "durable_write",
    "gather_bounded",
    "restore_from_backup",
    "temp_path_for",
]
