"""Application Configuration.

Usage:
    from copy_engine.config import get_settings, setup_logging
    settings = get_settings()
    setup_logging()  # Call once at startup
"""

from .logging import bind_request_context, clear_request_context, get_logger, setup_logging
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "bind_request_context",
    "clear_request_context",
]
