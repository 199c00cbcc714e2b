"""Core components: configuration, exceptions and the S3 client manager."""
