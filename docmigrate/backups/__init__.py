"""Backup snapshots taken before every migration write."""

from docmigrate.backups.store import MAX_BACKUPS, BackupRecord, BackupStore

__all__ = [
    "MAX_BACKUPS",
    "BackupRecord",
    "BackupStore",
]
