"""Task-local logging context for adding ride fields to log records."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_log_fields: ContextVar[dict[str, Any]] = ContextVar("log_fields", default={})


def get_log_fields() -> dict[str, Any]:
    """Fields currently bound to the running task or thread."""
    return dict(_log_fields.get())


class ContextFilter(logging.Filter):
    """Injects bound context fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields to every record logged inside the block.

    Nested blocks extend the outer fields and restore them on exit. Each
    asyncio task sees its own copy, so concurrent ride requests do not leak
    fields into each other.
    """
    token = _log_fields.set({**_log_fields.get(), **kwargs})
    try:
        yield
    finally:
        _log_fields.reset(token)


@contextmanager
def log_ride_context(ride_id: int, **kwargs: Any) -> Iterator[None]:
    """Convenience context manager for ride operations."""
    correlation_id = kwargs.pop("correlation_id", f"ride-{ride_id}")
    with log_context(ride_id=ride_id, correlation_id=correlation_id, **kwargs):
        yield
