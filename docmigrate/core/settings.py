"""Settings for docmigrate, loaded from the environment or a .env file."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docmigrate.core.exceptions import ConfigurationError


class DocMigrateSettings(BaseSettings):
    """Configuration for the migration engine and its S3 backend.

    Every field can be set through an environment variable of the same
    name in upper case (e.g. ``AWS_BUCKET_NAME``, ``MAX_BACKUPS``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # S3 backend
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_default_region: str = "us-east-1"
    aws_bucket_name: str | None = None
    aws_url: str | None = None
    aws_retry_attempts: int = Field(3, ge=1)

    # Storage keys
    store_prefix: str = "docmigrate/"
    document_key: str = "liquitask-data"
    backups_key: str = "liquitask-backups"
    migration_log_key: str = "liquitask-migration-log"

    # Retention
    max_backups: int = Field(3, ge=1)
    max_log_entries: int = Field(100, ge=1)

    # Schema
    baseline_version: str = "1.0.0"

    log_level: str = "INFO"

    def require_bucket(self) -> str:
        """Return the configured bucket name.

        Raises:
            ConfigurationError: If no bucket is configured
        """
        if not self.aws_bucket_name:
            raise ConfigurationError(missing_fields=["AWS_BUCKET_NAME"])
        return self.aws_bucket_name
