"""Pytest fixtures for docmigrate testing.

To use these fixtures, add to your conftest.py:

    pytest_plugins = ["docmigrate.testing.fixtures"]
"""

import pytest

from docmigrate.core.settings import DocMigrateSettings
from docmigrate.storage.memory import InMemoryStore
from docmigrate.testing.mocks import InMemoryS3
from docmigrate.testing.utils import create_test_settings


@pytest.fixture
def docmigrate_settings() -> DocMigrateSettings:
    """Provide test settings for docmigrate."""
    return create_test_settings()


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Provide an empty in-memory key-value store."""
    return InMemoryStore()


@pytest.fixture
def mock_s3() -> InMemoryS3:
    """Provide in-memory S3 mock."""
    s3 = InMemoryS3()
    yield s3
    s3.clear()


@pytest.fixture
def s3_test_bucket() -> str:
    """Provide test bucket name."""
    return "test-bucket"


@pytest.fixture
async def s3_client(mock_s3: InMemoryS3, s3_test_bucket: str):
    """Provide async S3 client with the test bucket created."""
    await mock_s3.create_bucket(Bucket=s3_test_bucket)
    yield mock_s3
