"""S3 client manager for the S3-backed key-value store."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

from aiobotocore.client import AioBaseClient
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import ClientError

from docmigrate.core.exceptions import (
    DocMigrateError,
    StoreConnectionError,
    StoreError,
)
from docmigrate.core.settings import DocMigrateSettings


@runtime_checkable
class S3ClientProtocol(Protocol):
    """Subset of the async S3 client API used by docmigrate."""

    async def get_object(self, Bucket: str, Key: str, **kwargs) -> dict[str, Any]:
        """Get an object from S3."""
        ...

    async def put_object(
        self, Bucket: str, Key: str, Body: bytes | str, **kwargs
    ) -> dict[str, Any]:
        """Put an object to S3."""
        ...

    async def delete_object(self, Bucket: str, Key: str, **kwargs) -> dict[str, Any]:
        """Delete an object from S3."""
        ...

    async def head_object(self, Bucket: str, Key: str, **kwargs) -> dict[str, Any]:
        """Get object metadata."""
        ...


def adjust_endpoint_url(
    endpoint_url: str | None, bucket_name: str | None
) -> str | None:
    """Adjust endpoint URL for path-style addressing if needed.

    Args:
        endpoint_url: The S3 endpoint URL
        bucket_name: The S3 bucket name

    Returns:
        Adjusted endpoint URL or None
    """
    if not endpoint_url:
        return None
    if bucket_name and f"{bucket_name}." in endpoint_url:
        return endpoint_url.replace(f"{bucket_name}.", "")
    return endpoint_url


class S3ClientManager:
    """Creates async S3 clients from docmigrate settings.

    One manager is built by the host's startup routine and handed to
    whatever needs a client; there is no process-wide instance.
    """

    def __init__(self, settings: DocMigrateSettings | None = None):
        """Initialize the client manager.

        Args:
            settings: docmigrate settings (loaded from the environment if omitted)
        """
        self.settings = settings or DocMigrateSettings()
        self._session = None
        self._endpoint_url = adjust_endpoint_url(
            self.settings.aws_url, self.settings.aws_bucket_name
        )
        self._client_config = Config(
            s3={"addressing_style": "path"},
            retries={
                "max_attempts": self.settings.aws_retry_attempts,
                "mode": "standard",
            },
        )

    @asynccontextmanager
    async def get_async_client(self) -> AsyncGenerator[AioBaseClient, None]:
        """Get an async S3 client within a context manager.

        Yields:
            An aiobotocore S3 client

        Raises:
            StoreConnectionError: If client creation fails
            StoreError: If a client operation fails
        """
        if self._session is None:
            self._session = get_session()

        try:
            async with self._session.create_client(
                "s3",
                region_name=self.settings.aws_default_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
                endpoint_url=self._endpoint_url,
                config=self._client_config,
            ) as client:
                yield client
        except DocMigrateError:
            raise
        except ClientError as e:
            raise StoreError(f"S3 client operation failed: {e}", original_error=e)
        except Exception as e:
            raise StoreConnectionError(
                original_error=e,
                endpoint=self._endpoint_url,
            )
