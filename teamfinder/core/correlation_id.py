"""
Correlation ID utilities for distributed tracing
Shared across the HTTP layer, the publisher and the consumers
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable to store correlation ID across async operations
correlation_id_context: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """
    Get the current correlation ID from context
    Generates a new one if none exists

    Returns:
        str: Current correlation ID
    """
    correlation_id = correlation_id_context.get("")
    if not correlation_id:
        correlation_id = create_correlation_id()
        correlation_id_context.set(correlation_id)
    return correlation_id


def peek_correlation_id() -> Optional[str]:
    """Return the correlation ID in context without generating one"""
    return correlation_id_context.get("") or None


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID in context

    Args:
        correlation_id: The correlation ID to set
    """
    correlation_id_context.set(correlation_id)


def create_correlation_id() -> str:
    """
    Create a new correlation ID

    Returns:
        str: New UUID-based correlation ID
    """
    return str(uuid.uuid4())
