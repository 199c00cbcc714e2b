"""S3-backed key-value store for docmigrate."""

import logging

from botocore.exceptions import ClientError

from docmigrate.core.client import S3ClientProtocol
from docmigrate.core.exceptions import StoreError
from docmigrate.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class S3KeyValueStore(KeyValueStore):
    """Stores each key as a single JSON object in an S3 bucket.

    The object for ``key`` lives at ``<prefix><key>``. Reads of a missing
    object return None; every other S3 failure raises ``StoreError``.
    """

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        bucket_name: str,
        prefix: str = "",
    ):
        """Initialize the store.

        Args:
            s3_client: An open async S3 client
            bucket_name: The S3 bucket name
            prefix: Key prefix prepended to every object key
        """
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.prefix = prefix

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> str | None:
        object_key = self._object_key(key)
        try:
            response = await self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
            body = await response["Body"].read()
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                return None
            raise StoreError(
                f"Failed to read '{object_key}': {e}",
                operation="get",
                key=object_key,
                original_error=e,
            )
        return body.decode("utf-8")

    async def set(self, key: str, value: str) -> None:
        object_key = self._object_key(key)
        try:
            await self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=object_key,
                Body=value.encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as e:
            logger.error(f"Failed to write {object_key}: {e}")
            raise StoreError(
                f"Failed to write '{object_key}': {e}",
                operation="set",
                key=object_key,
                original_error=e,
            )

    async def delete(self, key: str) -> bool:
        object_key = self._object_key(key)
        try:
            await self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404", "NotFound"):
                return False
            raise StoreError(
                f"Failed to check '{object_key}': {e}",
                operation="delete",
                key=object_key,
                original_error=e,
            )

        try:
            await self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
        except ClientError as e:
            raise StoreError(
                f"Failed to delete '{object_key}': {e}",
                operation="delete",
                key=object_key,
                original_error=e,
            )
        return True
