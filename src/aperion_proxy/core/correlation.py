"""
Correlation IDs for Mediated Calls.

Every call entering a mediator chain can be tagged with a correlation ID so
that the log lines and audit events produced by each link of the chain can
be tied back to the same attempt.

Usage:
    with correlation_context() as cid:
        chain.view()

    # Anywhere below, inside any mediator
    current_id = get_correlation_id()
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Generator

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

_trace_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "trace_context", default={}
)


def get_correlation_id() -> str | None:
    """
    Get the current correlation ID.

    Returns:
        Current correlation ID or None if not in a correlation context
    """
    return _correlation_id.get()


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Format: mx-{uuid4} (mx = mediation)

    Returns:
        New unique correlation ID
    """
    return f"mx-{uuid.uuid4().hex[:16]}"


@contextmanager
def correlation_context(
    correlation_id: str | None = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """
    Context manager for correlation ID scope.

    Sets the correlation ID for the duration of the block and restores the
    previous one on exit. Passing no ID generates a new one.

    Args:
        correlation_id: ID to use (generates new one if None)
        **extra_context: Additional context to store (e.g., actor_id)

    Yields:
        The active correlation ID
    """
    cid = correlation_id or generate_correlation_id()

    prev_id = _correlation_id.get()
    prev_context = _trace_context.get()

    _correlation_id.set(cid)
    if extra_context:
        _trace_context.set({**prev_context, **extra_context, "correlation_id": cid})

    try:
        yield cid
    finally:
        _correlation_id.set(prev_id)
        _trace_context.set(prev_context)


@contextmanager
def ensure_correlation() -> Generator[str, None, None]:
    """Reuse the active correlation ID, or open a new context if there is none."""
    current = _correlation_id.get()
    if current is not None:
        yield current
        return
    with correlation_context() as cid:
        yield cid


def get_trace_context() -> dict[str, Any]:
    """
    Get the full trace context.

    Returns:
        Dictionary with correlation_id and any extra context
    """
    context = dict(_trace_context.get())
    context["correlation_id"] = _correlation_id.get()
    return context


class CorrelatedLogger:
    """
    Logger wrapper tagging records with the attempt and the chain link.

    Every record carries ``correlation_id`` and, when given, ``link``: the
    kind of link (real, lazy, authorization, audit) that emitted it. One
    call through a chain can then be followed link by link.

    Usage:
        logger = CorrelatedLogger(logging.getLogger(__name__), link="lazy")

        with correlation_context("mx-123"):
            logger.info("Loading document")
            # record.correlation_id == "mx-123", record.link == "lazy"
    """

    def __init__(self, logger: Any, *, link: str | None = None) -> None:
        self._logger = logger
        self._link = link

    @property
    def link(self) -> str | None:
        return self._link

    def _add_correlation(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Add correlation ID and link to log extra dict."""
        extra = kwargs.get("extra", {})
        extra.update(get_trace_context())
        if self._link is not None:
            extra["link"] = self._link
        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._add_correlation(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._add_correlation(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._add_correlation(kwargs))

