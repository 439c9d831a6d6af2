"""
Log filters that attach call context to records.

The correlation id lives in a ContextVar: every asyncio task gets its own
copy, so concurrent sends on one provider never see each other's id.
"""

import contextvars
import logging
from typing import Dict, Any, Optional


_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "graph_http_correlation_id", default=None
)


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """
    Set correlation id for the current context.

    Returns:
        Token for restoring the previous value with reset_correlation_id()
    """
    return _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the value that was current before set_correlation_id()."""
    _correlation_id.reset(token)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """
    Adds `correlation_id` to records emitted inside a send call.

    Example:
        >>> handler.addFilter(CorrelationIdFilter())
        >>> set_correlation_id("9f1c...")
        >>> logger.info("Request started")  # record.correlation_id == "9f1c..."
    """

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, sdk version) to every record.

    Fields already present on the record are not overwritten.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
