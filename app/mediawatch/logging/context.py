"""Dispatch context binding for structured logging.

Binds a correlation id (and any extra metadata) for the lifetime of one
dispatch call so that every log line emitted while fanning out to agents
can be tied back to the event that caused it.

Usage:
    from mediawatch.logging import bind_dispatch_context

    with bind_dispatch_context(event_type="server_down"):
        logger.info("dispatching_notification")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_dispatch_context(
    dispatch_id: Optional[str] = None,
    event_type: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind dispatch-scoped context to all logs within the context manager.

    Args:
        dispatch_id: Unique dispatch identifier. Auto-generated if not provided.
        event_type: Notification event type being dispatched.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The dispatch id bound to the context.
    """
    context: dict[str, Any] = {"dispatch_id": dispatch_id or str(uuid.uuid4())}

    if event_type is not None:
        context["event_type"] = event_type

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["dispatch_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_dispatch_id() -> Optional[str]:
    """Get the current dispatch ID from the logging context.

    Returns:
        The dispatch ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("dispatch_id")


def clear_dispatch_context() -> None:
    """Clear all dispatch-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
