"""FastAPI error handlers for docmigrate exceptions.

This module converts docmigrate exceptions raised inside recovery
endpoints into JSON responses with the exception's hint attached.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docmigrate.core.exceptions import (
    ConfigurationError,
    DocMigrateError,
    DocumentFormatError,
    MigrationConfigError,
    StoreConnectionError,
    StoreError,
)


async def docmigrate_exception_handler(
    request: Request,
    exc: DocMigrateError
) -> JSONResponse:
    """Handle docmigrate exceptions with helpful error messages.

    Args:
        request: The FastAPI request
        exc: The docmigrate exception

    Returns:
        JSONResponse with error details
    """
    if isinstance(exc, StoreConnectionError):
        status_code = 503
        error_type = "service_unavailable"
    elif isinstance(exc, StoreError):
        status_code = 503
        error_type = "store_error"
    elif isinstance(exc, DocumentFormatError):
        status_code = 422
        error_type = "document_format_error"
    elif isinstance(exc, (MigrationConfigError, ConfigurationError)):
        status_code = 500
        error_type = "configuration_error"
    else:
        status_code = 500
        error_type = "internal_error"

    content = {
        "error": error_type,
        "message": exc.message,
    }
    if exc.hint:
        content["hint"] = exc.hint
    if isinstance(exc, StoreError) and exc.key:
        content["key"] = exc.key

    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    """Register docmigrate exception handlers with a FastAPI app.

    Args:
        app: The FastAPI application
    """
    app.add_exception_handler(DocMigrateError, docmigrate_exception_handler)
