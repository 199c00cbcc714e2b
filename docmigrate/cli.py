"""docmigrate CLI tool."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import click

from docmigrate import __version__
from docmigrate.core.client import S3ClientManager
from docmigrate.core.exceptions import DocMigrateError
from docmigrate.core.settings import DocMigrateSettings
from docmigrate.engine import build_runner, load_document, migrate_stored_document
from docmigrate.migrations.definitions import default_registry
from docmigrate.migrations.runner import MigrationRunner
from docmigrate.storage.s3 import S3KeyValueStore


def _settings(bucket, endpoint, prefix) -> DocMigrateSettings:
    overrides = {}
    if bucket:
        overrides["aws_bucket_name"] = bucket
    if endpoint:
        overrides["aws_url"] = endpoint
    if prefix is not None:
        overrides["store_prefix"] = prefix
    return DocMigrateSettings(**overrides)


@asynccontextmanager
async def _open(ctx) -> AsyncGenerator[tuple[S3KeyValueStore, MigrationRunner], None]:
    """Open the S3 store and build a runner from the group options."""
    settings = ctx.obj["settings"]
    bucket = settings.require_bucket()
    manager = S3ClientManager(settings)

    async with manager.get_async_client() as s3_client:
        store = S3KeyValueStore(s3_client, bucket, settings.store_prefix)
        yield store, build_runner(store, settings)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except DocMigrateError as e:
        raise click.ClickException(str(e))


def store_options(func):
    func = click.option("--prefix", default=None, help="Key prefix inside the bucket")(func)
    func = click.option("--endpoint", help="S3 endpoint URL (for LocalStack)")(func)
    func = click.option("--bucket", help="S3 bucket name (or AWS_BUCKET_NAME)")(func)
    return func


@click.group()
@store_options
@click.option("--log-level", default=None, help="Python log level (default from LOG_LEVEL)")
@click.pass_context
def cli(ctx, bucket, endpoint, prefix, log_level):
    """docmigrate CLI - Inspect and migrate a versioned application document."""
    ctx.ensure_object(dict)
    settings = _settings(bucket, endpoint, prefix)
    ctx.obj["settings"] = settings
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def version():
    """Show docmigrate version."""
    click.echo(f"docmigrate version: {__version__}")


@cli.command()
@click.pass_context
def status(ctx):
    """Show the stored document's version and pending migrations."""

    async def _status():
        settings = ctx.obj["settings"]
        async with _open(ctx) as (store, runner):
            doc = await load_document(store, settings.document_key)
            click.echo(f"\nCurrent schema version: {runner.current_version}")

            if doc is None:
                click.echo(f"No document stored at '{settings.document_key}'")
                return

            stored_version = doc.get("version")
            click.echo(f"Document version: {stored_version or '(none)'}")

            if not runner.needs_migration(stored_version):
                click.echo("✅ Up to date")
                return

            click.echo("\nPending:")
            for step in runner.registry.pending_from(stored_version):
                click.echo(f"  ○ {step.target_version}: {step.description}")

    _run(_status())


@cli.group()
def migrate():
    """Document migration commands."""
    pass


@migrate.command("pending")
@click.option("--from", "from_version", default=None, help="Version to migrate from")
@click.pass_context
def migrate_pending(ctx, from_version):
    """List registered migrations newer than a version."""
    settings = ctx.obj["settings"]
    registry = default_registry(baseline=settings.baseline_version)
    pending = registry.pending_from(from_version)
    if not pending:
        click.echo("✅ No pending migrations")
        return
    for step in pending:
        click.echo(f"  ○ {step.target_version}: {step.description}")


@migrate.command("run")
@click.pass_context
def migrate_run(ctx):
    """Migrate the stored document to the current version."""

    async def _migrate():
        settings = ctx.obj["settings"]
        async with _open(ctx) as (store, runner):
            result = await migrate_stored_document(store, runner, settings.document_key)

        if result is None:
            click.echo(f"No document stored at '{settings.document_key}'")
            return

        if not result.success:
            click.echo(f"❌ Migration failed at {result.migrated_to}: {result.error}")
            click.echo(f"   Restore with: docmigrate backups restore {result.backup_id} --apply")
            ctx.exit(1)

        if result.backup_id is None:
            click.echo(f"✅ Already at version {result.migrated_to}")
            return

        click.echo(f"✅ Migrated {result.migrated_from} → {result.migrated_to}")
        click.echo(f"   Backup: {result.backup_id}")

    _run(_migrate())


@cli.group()
def backups():
    """Backup commands."""
    pass


@backups.command("list")
@click.pass_context
def backups_list(ctx):
    """List backups, newest first."""

    async def _list():
        async with _open(ctx) as (store, runner):
            records = await runner.list_backups()

        if not records:
            click.echo("No backups found")
            return

        for record in records:
            click.echo(
                f"  {record['id']}  v{record['version']}  "
                f"{record['size_bytes']} bytes  {record['timestamp']}"
            )

    _run(_list())


@backups.command("restore")
@click.argument("backup_id")
@click.option("--output", type=click.Path(), help="Write the snapshot to a JSON file")
@click.option("--apply", is_flag=True, help="Replace the stored document with the snapshot")
@click.pass_context
def backups_restore(ctx, backup_id, output, apply):
    """Restore a backup snapshot."""

    async def _restore():
        settings = ctx.obj["settings"]
        async with _open(ctx) as (store, runner):
            snapshot = await runner.restore_backup(backup_id)
            if snapshot is not None and apply:
                await store.set_json(settings.document_key, snapshot)

        if snapshot is None:
            click.echo(f"❌ Backup '{backup_id}' not found")
            ctx.exit(1)

        if apply:
            click.echo(
                f"✅ Restored '{settings.document_key}' to version "
                f"{snapshot.get('version', '(none)')}"
            )
        if output:
            Path(output).write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
            click.echo(f"✅ Snapshot written to {output}")
        elif not apply:
            click.echo(json.dumps(snapshot, indent=2))

    _run(_restore())


@backups.command("delete")
@click.argument("backup_id")
@click.pass_context
def backups_delete(ctx, backup_id):
    """Delete a backup."""

    async def _delete():
        async with _open(ctx) as (store, runner):
            deleted = await runner.delete_backup(backup_id)
        if deleted:
            click.echo(f"✓ Deleted {backup_id}")
        else:
            click.echo(f"❌ Backup '{backup_id}' not found")
            ctx.exit(1)

    _run(_delete())


@cli.group()
def log():
    """Migration log commands."""
    pass


@log.command("show")
@click.pass_context
def log_show(ctx):
    """Print the migration log, oldest first."""

    async def _show():
        async with _open(ctx) as (store, runner):
            entries = await runner.read_log()
        if not entries:
            click.echo("Migration log is empty")
            return
        for entry in entries:
            marker = "!" if entry.level == "error" else " "
            click.echo(f"{marker} {entry}")

    _run(_show())


@log.command("clear")
@click.pass_context
def log_clear(ctx):
    """Empty the migration log."""

    async def _clear():
        async with _open(ctx) as (store, runner):
            await runner.clear_log()
        click.echo("✓ Migration log cleared")

    _run(_clear())


if __name__ == "__main__":
    cli()
