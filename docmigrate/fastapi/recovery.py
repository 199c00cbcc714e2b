"""HTTP endpoints for an operator-facing data recovery screen."""

import copy
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from docmigrate.migrations.runner import MigrationRunner


class BackupInfo(BaseModel):
    """Backup metadata for API responses."""

    id: str = Field(..., description="Unique backup identifier")
    version: str = Field(..., description="Document version at snapshot time")
    timestamp: datetime
    size_bytes: int


class LogEntryOut(BaseModel):
    timestamp: datetime
    message: str
    level: str


class MigrationStatus(BaseModel):
    current_version: str
    version: str | None = None
    needs_migration: bool
    pending: List[str]


def create_recovery_router(
    runner: MigrationRunner,
    prefix: str = "/recovery",
) -> APIRouter:
    """Build a router exposing backup and log operations of ``runner``.

    Args:
        runner: The host's migration runner
        prefix: URL prefix for all routes

    Returns:
        An APIRouter to include in the host app
    """
    router = APIRouter(prefix=prefix, tags=["recovery"])

    @router.get("/status", response_model=MigrationStatus)
    async def migration_status(version: str | None = None):
        return MigrationStatus(
            current_version=runner.current_version,
            version=version,
            needs_migration=runner.needs_migration(version),
            pending=[
                step.target_version
                for step in runner.registry.pending_from(version)
            ],
        )

    @router.get("/backups", response_model=List[BackupInfo])
    async def list_backups():
        return await runner.list_backups()

    @router.get("/backups/{backup_id}")
    async def view_backup(backup_id: str) -> Dict[str, Any]:
        record = await runner.backups.get(backup_id)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Backup '{backup_id}' not found",
            )
        return copy.deepcopy(record.snapshot)

    @router.post("/backups/{backup_id}/restore")
    async def restore_backup(backup_id: str) -> Dict[str, Any]:
        """Hand back the snapshot for the host to apply; the restore is logged."""
        snapshot = await runner.restore_backup(backup_id)
        if snapshot is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Backup '{backup_id}' not found",
            )
        return snapshot

    @router.delete("/backups/{backup_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_backup(backup_id: str):
        if not await runner.delete_backup(backup_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Backup '{backup_id}' not found",
            )

    @router.get("/migration-log", response_model=List[LogEntryOut])
    async def read_log():
        return [entry.to_dict() for entry in await runner.read_log()]

    @router.delete("/migration-log", status_code=status.HTTP_204_NO_CONTENT)
    async def clear_log():
        await runner.clear_log()

    return router
