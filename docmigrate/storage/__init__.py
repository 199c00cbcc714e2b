"""Key-value stores the migration engine persists backups and logs to."""

from docmigrate.storage.base import KeyValueStore
from docmigrate.storage.memory import InMemoryStore
from docmigrate.storage.s3 import S3KeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "S3KeyValueStore",
]
