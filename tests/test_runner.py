"""Tests for the migration runner."""

import pytest

from docmigrate.core.exceptions import StoreError
from docmigrate.migrations.base import MigrationStep
from docmigrate.migrations.definitions import default_registry
from docmigrate.migrations.operations import AddField
from docmigrate.migrations.registry import MigrationRegistry
from docmigrate.testing.mocks import FailingStore
from docmigrate.testing.utils import build_test_runner


def _add_x(doc):
    return {**doc, "x": 1}


def _set_y(doc):
    return {**doc, "y": doc["x"] + 1}


def _explode(doc):
    raise ValueError("cannot convert tasks")


@pytest.fixture
def chain_registry():
    return MigrationRegistry([
        MigrationStep("1.1.0", "Add x", transform=_add_x),
        MigrationStep("1.2.0", "Derive y from x", transform=_set_y),
    ])


class TestNeedsMigration:
    """Tests for MigrationRunner.needs_migration."""

    def test_current_version(self, chain_registry):
        """Test the current version needs nothing."""
        runner = build_test_runner(chain_registry)

        assert runner.needs_migration("1.2.0") is False

    def test_missing_version(self, chain_registry):
        """Test a missing version needs migration."""
        runner = build_test_runner(chain_registry)

        assert runner.needs_migration(None) is True
        assert runner.needs_migration("") is True

    def test_older_and_newer(self, chain_registry):
        """Test older versions need migration and newer ones don't."""
        runner = build_test_runner(chain_registry)

        assert runner.needs_migration("1.0.0") is True
        assert runner.needs_migration("2.0.0") is False


class TestRun:
    """Tests for MigrationRunner.run."""

    @pytest.mark.asyncio
    async def test_idempotent_when_current(self, chain_registry):
        """Test running at the current version is a no-op."""
        runner = build_test_runner(chain_registry)
        doc = {"version": "1.2.0", "tasks": [{"id": 1}]}

        first = await runner.run(doc, "1.2.0")
        second = await runner.run(doc, "1.2.0")

        for result in (first, second):
            assert result.success is True
            assert result.migrated_from == result.migrated_to == "1.2.0"
            assert result.data == {"version": "1.2.0", "tasks": [{"id": 1}]}
            assert result.backup_id is None
        assert await runner.list_backups() == []
        assert await runner.read_log() == []

    @pytest.mark.asyncio
    async def test_idempotent_with_equivalent_version(self, chain_registry):
        """Test "1.2" counts as already current."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"version": "1.2"}, "1.2")

        assert result.backup_id is None
        assert await runner.list_backups() == []

    @pytest.mark.asyncio
    async def test_sequential_application(self, chain_registry):
        """Test each step receives the previous step's output."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        assert result.success is True
        assert result.migrated_from == "1.0.0"
        assert result.migrated_to == "1.2.0"
        assert result.data == {"version": "1.2.0", "x": 1, "y": 2}
        assert result.backup_id is not None

    @pytest.mark.asyncio
    async def test_partial_chain(self, chain_registry):
        """Test only steps after the declared version run."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"version": "1.1.0", "x": 10}, "1.1.0")

        assert result.data == {"version": "1.2.0", "x": 10, "y": 11}

    @pytest.mark.asyncio
    async def test_unknown_fields_preserved(self, chain_registry):
        """Test fields no step knows about pass through."""
        runner = build_test_runner(chain_registry)
        doc = {"version": "1.0.0", "pluginState": {"theme": "dark"}, "tasks": [1, 2]}

        result = await runner.run(doc, "1.0.0")

        assert result.data["pluginState"] == {"theme": "dark"}
        assert result.data["tasks"] == [1, 2]

    @pytest.mark.asyncio
    async def test_input_not_mutated(self, chain_registry):
        """Test the caller's document is left untouched."""
        runner = build_test_runner(chain_registry)
        doc = {"version": "1.0.0", "tasks": []}

        await runner.run(doc, "1.0.0")

        assert doc == {"version": "1.0.0", "tasks": []}

    @pytest.mark.asyncio
    async def test_saved_views_scenario(self):
        """Test the single-step savedViews migration from 0.0.0."""
        registry = MigrationRegistry([
            MigrationStep("1.0.0", "Add savedViews", operations=[AddField("savedViews", default_factory=list)]),
        ])
        runner = build_test_runner(registry)

        result = await runner.run({"version": "0.0.0"}, "0.0.0")

        assert result.success is True
        assert result.data == {"version": "1.0.0", "savedViews": []}
        assert await runner.restore_backup(result.backup_id) == {"version": "0.0.0"}

    @pytest.mark.asyncio
    async def test_version_stamped_when_step_forgets(self):
        """Test the runner stamps each step's target version."""
        seen = []

        def record(doc):
            seen.append(doc["version"])
            return doc

        registry = MigrationRegistry([
            MigrationStep("1.1.0", "no stamp", transform=lambda doc: {**doc, "version": "bogus"}),
            MigrationStep("1.2.0", "record", transform=record),
        ])
        runner = build_test_runner(registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        assert seen == ["1.1.0"]
        assert result.data["version"] == "1.2.0"

    @pytest.mark.asyncio
    async def test_missing_declared_version(self, chain_registry):
        """Test a missing declared version runs every step."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"tasks": []}, None)

        assert result.success is True
        assert result.migrated_from == "0.0.0"
        assert result.data == {"tasks": [], "x": 1, "y": 2, "version": "1.2.0"}

    @pytest.mark.asyncio
    async def test_no_pending_stamps_version(self):
        """Test an empty registry still stamps the baseline and backs up."""
        runner = build_test_runner(MigrationRegistry())

        result = await runner.run({"version": "0.9.0", "tasks": []}, "0.9.0")

        assert result.success is True
        assert result.migrated_to == "1.0.0"
        assert result.data == {"version": "1.0.0", "tasks": []}
        assert result.backup_id is not None
        assert len(await runner.list_backups()) == 1

    @pytest.mark.asyncio
    async def test_declared_newer_than_current(self, chain_registry):
        """Test a document ahead of the registry is stamped to current."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"version": "3.0.0"}, "3.0.0")

        assert result.success is True
        assert result.migrated_to == "1.2.0"
        assert result.data["version"] == "1.2.0"
        assert result.backup_id is not None

    @pytest.mark.asyncio
    async def test_failing_second_step(self):
        """Test a failure stops the chain and reports the last good version."""
        calls = []

        def never(doc):
            calls.append(doc)
            return doc

        registry = MigrationRegistry([
            MigrationStep("1.1.0", "Add x", transform=_add_x),
            MigrationStep("1.2.0", "Explode", transform=_explode),
            MigrationStep("1.3.0", "Never runs", transform=never),
        ])
        runner = build_test_runner(registry)
        original = {"version": "1.0.0", "tasks": [{"id": 1}]}

        result = await runner.run(original, "1.0.0")

        assert result.success is False
        assert result.migrated_from == "1.0.0"
        assert result.migrated_to == "1.1.0"
        assert result.data is None
        assert result.error == "cannot convert tasks"
        assert calls == []
        assert await runner.restore_backup(result.backup_id) == original

    @pytest.mark.asyncio
    async def test_failing_first_step(self):
        """Test a failure on the first step reports the declared version."""
        registry = MigrationRegistry([MigrationStep("1.1.0", "Explode", transform=_explode)])
        runner = build_test_runner(registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        assert result.success is False
        assert result.migrated_to == "1.0.0"

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        """Test an exception without a message reports its class name."""

        def bare(doc):
            raise KeyError()

        registry = MigrationRegistry([MigrationStep("1.1.0", "bare", transform=bare)])
        runner = build_test_runner(registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        assert result.error == "KeyError"

    @pytest.mark.asyncio
    async def test_malformed_projects_fail_registered_migration(self):
        """Test projects stored as a mapping fail the 1.1.0 step with a backup."""
        runner = build_test_runner(default_registry())
        original = {"version": "1.0.0", "projects": {"p1": {"name": "A"}}}

        result = await runner.run(original, "1.0.0")

        assert result.success is False
        assert result.migrated_to == "1.0.0"
        assert result.data is None
        assert "projects must be a list" in result.error
        assert await runner.restore_backup(result.backup_id) == original

    @pytest.mark.asyncio
    async def test_retry_after_failure_is_safe(self):
        """Test re-running from the original version after a fix succeeds."""
        attempts = {"count": 0}

        def flaky(doc):
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise RuntimeError("transient")
            return {**doc, "fixed": True}

        registry = MigrationRegistry([
            MigrationStep("1.1.0", "Add x", transform=_add_x),
            MigrationStep("1.2.0", "Flaky", transform=flaky),
        ])
        runner = build_test_runner(registry)
        doc = {"version": "1.0.0"}

        failed = await runner.run(doc, "1.0.0")
        retried = await runner.run(doc, "1.0.0")

        assert failed.success is False
        assert retried.success is True
        assert retried.data == {"version": "1.2.0", "x": 1, "fixed": True}

    @pytest.mark.asyncio
    async def test_backup_failure_stops_run(self):
        """Test nothing is migrated when the backup cannot be written."""
        calls = []
        registry = MigrationRegistry([
            MigrationStep("1.1.0", "Track", transform=lambda doc: calls.append(doc) or doc),
        ])
        store = FailingStore(fail_keys={"liquitask-backups"})
        runner = build_test_runner(registry, store=store)

        with pytest.raises(StoreError):
            await runner.run({"version": "1.0.0"}, "1.0.0")

        assert calls == []

    @pytest.mark.asyncio
    async def test_run_is_logged(self, chain_registry):
        """Test a successful run writes the expected log trail."""
        runner = build_test_runner(chain_registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        messages = [e.message for e in await runner.read_log()]
        assert messages[0] == f"Backup created: {result.backup_id} (version 1.0.0)"
        assert "Starting migration from 1.0.0 to 1.2.0" in messages
        assert "Migration to 1.1.0 completed successfully" in messages
        assert messages[-1] == "Migration complete: 1.0.0 → 1.2.0"

    @pytest.mark.asyncio
    async def test_failure_logged_as_error(self):
        """Test a failing step writes an error entry."""
        registry = MigrationRegistry([MigrationStep("1.1.0", "Explode", transform=_explode)])
        runner = build_test_runner(registry)

        await runner.run({"version": "1.0.0"}, "1.0.0")

        errors = [e for e in await runner.read_log() if e.level == "error"]
        assert [e.message for e in errors] == ["Migration failed at 1.0.0: cannot convert tasks"]

    @pytest.mark.asyncio
    async def test_backup_retention_across_runs(self, chain_registry):
        """Test repeated runs keep at most the configured number of backups."""
        runner = build_test_runner(chain_registry, max_backups=2)

        for _ in range(4):
            await runner.run({"version": "1.0.0"}, "1.0.0")

        assert len(await runner.list_backups()) == 2


class TestMigrationResult:
    """Tests for MigrationResult."""

    @pytest.mark.asyncio
    async def test_to_dict_omits_empty_fields(self):
        """Test failure results serialize without data."""
        registry = MigrationRegistry([MigrationStep("1.1.0", "Explode", transform=_explode)])
        runner = build_test_runner(registry)

        result = await runner.run({"version": "1.0.0"}, "1.0.0")

        data = result.to_dict()
        assert "data" not in data
        assert data["error"] == "cannot convert tasks"
        assert data["backup_id"] == result.backup_id
