"""FastAPI integration: recovery endpoints and error handlers."""

from docmigrate.fastapi.error_handlers import register_error_handlers
from docmigrate.fastapi.recovery import create_recovery_router

__all__ = [
    "create_recovery_router",
    "register_error_handlers",
]
