"""Structured logging infrastructure.

Centralized logging configuration and utilities built on structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_dispatch_context(): Context manager for dispatch-scoped logging
    - get_dispatch_id(): Get current dispatch ID from context
    - clear_dispatch_context(): Clear all dispatch context

Processors:
    - add_app_info(): Add app name/version
    - mask_sensitive_data(): Redact credentials and webhook URLs
    - truncate_large_values(): Limit string lengths

Example:
    from mediawatch.logging import get_module_logger, bind_dispatch_context

    logger = get_module_logger()

    with bind_dispatch_context(event_type="server_down"):
        logger.info("dispatching_notification")
"""

from mediawatch.logging.setup import (
    configure_logging,
    get_module_logger,
)

from mediawatch.logging.context import (
    bind_dispatch_context,
    get_dispatch_id,
    clear_dispatch_context,
)

from mediawatch.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_dispatch_context",
    "get_dispatch_id",
    "clear_dispatch_context",
    # Processors
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
