"""Testing utilities for applications embedding docmigrate."""

from docmigrate.core.settings import DocMigrateSettings
from docmigrate.engine import build_runner
from docmigrate.migrations.registry import MigrationRegistry
from docmigrate.migrations.runner import MigrationRunner
from docmigrate.storage.base import KeyValueStore
from docmigrate.storage.memory import InMemoryStore


def create_test_settings(
    bucket_name: str = "test-bucket",
    prefix: str = "test/",
    **overrides
) -> DocMigrateSettings:
    """Create docmigrate settings for testing.

    Args:
        bucket_name: The S3 bucket name for tests
        prefix: The store key prefix for tests
        **overrides: Additional settings to override

    Returns:
        DocMigrateSettings instance configured for testing
    """
    return DocMigrateSettings(
        aws_bucket_name=bucket_name,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        aws_default_region="us-east-1",
        aws_url="http://localhost:4566",
        store_prefix=prefix,
        _env_file=None,
        **overrides,
    )


def build_test_runner(
    registry: MigrationRegistry,
    store: KeyValueStore | None = None,
    **overrides
) -> MigrationRunner:
    """Build a runner over an in-memory store (or the given one).

    Example:
        >>> runner = build_test_runner(MigrationRegistry([step]))
        >>> result = await runner.run({"version": "1.0.0"}, "1.0.0")
    """
    settings = create_test_settings(**overrides)
    return build_runner(store or InMemoryStore(), settings, registry)
