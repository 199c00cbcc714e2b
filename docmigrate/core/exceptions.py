"""Custom exceptions for docmigrate.

This module provides a hierarchy of exceptions with helpful hints so that
a failed startup migration can be diagnosed from the error alone.
"""


class DocMigrateError(Exception):
    """Base exception for all docmigrate errors.

    All docmigrate exceptions inherit from this class, making it easy
    to catch every engine-specific error at the application boundary.
    """

    def __init__(self, message: str, hint: str | None = None):
        """Initialize the exception.

        Args:
            message: The error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class StoreError(DocMigrateError):
    """Raised when the backing key-value store fails to read or persist a value.

    A failure while persisting the backup set must stop the migration run,
    so this error is never swallowed by the engine.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        key: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the store error.

        Args:
            message: The error message
            operation: The store operation that failed (e.g., 'set')
            key: The key involved in the operation
            original_error: The original exception
        """
        self.operation = operation
        self.key = key
        self.original_error = original_error

        hint = None
        if "NoSuchBucket" in message:
            hint = "The configured bucket does not exist."
        elif "AccessDenied" in message:
            hint = "Check your IAM permissions for this operation."
        elif operation == "set":
            hint = f"Nothing was migrated; the value at '{key}' could not be written."

        super().__init__(message, hint)


class StoreConnectionError(DocMigrateError):
    """Raised when there is an error connecting to the S3 backend."""

    def __init__(
        self,
        message: str | None = None,
        original_error: Exception | None = None,
        endpoint: str | None = None,
    ):
        """Initialize the connection error.

        Args:
            message: Custom error message (optional)
            original_error: The original exception that caused this error
            endpoint: The S3 endpoint URL being connected to
        """
        self.original_error = original_error
        self.endpoint = endpoint

        if message:
            final_message = message
            hint = None
        elif original_error:
            final_message, hint = self._format_error(original_error, endpoint)
        else:
            final_message = "Failed to connect to S3"
            hint = "Check your AWS credentials and network connection."

        super().__init__(final_message, hint)

    def _format_error(
        self, error: Exception, endpoint: str | None
    ) -> tuple[str, str | None]:
        """Format the error message based on the underlying error."""
        error_str = str(error)

        if "Could not connect" in error_str or "Connection refused" in error_str:
            if endpoint and "localhost" in endpoint:
                return (
                    f"Could not connect to S3 at {endpoint}",
                    "If using LocalStack, ensure it's running: docker run -d -p 4566:4566 localstack/localstack",
                )
            return (
                f"Could not connect to S3 at {endpoint or 'AWS'}",
                "Check your network connection and AWS endpoint configuration.",
            )

        if "InvalidAccessKeyId" in error_str:
            return (
                "Invalid AWS access key ID",
                "Check your AWS_ACCESS_KEY_ID environment variable.",
            )

        if "ExpiredToken" in error_str:
            return (
                "AWS credentials have expired",
                "Refresh your AWS credentials or generate new access keys.",
            )

        return (f"S3 connection error: {error}", None)


class MigrationConfigError(DocMigrateError):
    """Raised when the migration list is not strictly ascending."""

    def __init__(self, message: str, version: str | None = None):
        """Initialize the configuration error.

        Args:
            message: The error message
            version: The offending target version
        """
        self.version = version
        super().__init__(
            message,
            "Append new migrations at the end of the list with a higher target version.",
        )


class DocumentFormatError(DocMigrateError):
    """Raised when a persisted document is not a JSON object."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(
            message,
            "Restore a backup or repair the stored value before migrating.",
        )


class ConfigurationError(DocMigrateError):
    """Raised when docmigrate configuration is invalid."""

    def __init__(
        self,
        message: str | None = None,
        missing_fields: list[str] | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Custom error message
            missing_fields: List of missing configuration fields
        """
        self.missing_fields = missing_fields or []

        if missing_fields:
            fields_str = ", ".join(missing_fields)
            message = f"Missing required configuration: {fields_str}"
            hint = "Set these as environment variables or in your .env file."
        else:
            hint = "Check your docmigrate configuration."

        super().__init__(message or "Invalid docmigrate configuration", hint)
