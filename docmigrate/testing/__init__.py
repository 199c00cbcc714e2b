"""Testing utilities for docmigrate.

Usage in conftest.py:
    from docmigrate.testing import InMemoryS3, build_test_runner

Or use provided fixtures directly:
    pytest_plugins = ["docmigrate.testing.fixtures"]
"""

from docmigrate.testing.mocks import FailingStore, InMemoryS3, mock_s3_client
from docmigrate.testing.utils import build_test_runner, create_test_settings

__all__ = [
    "InMemoryS3",
    "FailingStore",
    "mock_s3_client",
    "create_test_settings",
    "build_test_runner",
]
