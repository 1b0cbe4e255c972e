"""
Structured Audit Trail for Aperion Proxy.

Every capability call seen by an AuditMediator becomes one AuditEvent,
delivered to an AuditSink. Events are JSON-structured for easy parsing.

Audit records are kept in memory or forwarded to Python logging only;
nothing here writes to disk.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from aperion_proxy.core.errors import LogSinkUnavailable
from aperion_proxy.core.resource import Capability


class AuditOutcome(str, Enum):
    """Outcome of an audited call."""

    PENDING = "pending"
    SUCCESS = "success"
    DENIED = "denied"
    NOT_FOUND = "not_found"
    CONSTRUCTION_FAILED = "construction_failed"
    ERROR = "error"

    @classmethod
    def from_error_kind(cls, kind: str) -> AuditOutcome:
        """Map an error kind to an outcome. Unknown kinds map to ERROR."""
        try:
            return cls(kind)
        except ValueError:
            return cls.ERROR


@dataclass
class AuditEvent:
    """
    One audited call attempt.

    Created before delegation with outcome PENDING, then completed in place
    once the wrapped call returns or raises.
    """

    actor_id: str
    operation: Capability
    timestamp: float = field(default_factory=time.time)
    outcome: AuditOutcome = AuditOutcome.PENDING
    error_kind: str | None = None
    error_message: str | None = None
    duration_ms: float | None = None
    correlation_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_failure(self) -> bool:
        return self.outcome not in (AuditOutcome.SUCCESS, AuditOutcome.PENDING)

    def complete(
        self,
        outcome: AuditOutcome,
        *,
        error_kind: str | None = None,
        error_message: str | None = None,
    ) -> AuditEvent:
        """Record the outcome and elapsed time."""
        self.outcome = outcome
        self.error_kind = error_kind
        self.error_message = error_message
        self.duration_ms = (time.time() - self.timestamp) * 1000
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["operation"] = self.operation.value
        data["outcome"] = self.outcome.value
        data["timestamp_iso"] = datetime.fromtimestamp(self.timestamp).isoformat()
        return data

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


@runtime_checkable
class AuditSink(Protocol):
    """
    Protocol for audit event destinations.

    Implementations raise LogSinkUnavailable when an event cannot be
    accepted. AuditMediator also tolerates any other exception a
    sink raises, so a broken sink never fails an audited call.
    """

    def record(self, event: AuditEvent) -> None:
        """Accept one completed event."""
        ...


class InMemoryAuditSink:
    """
    In-memory audit sink.

    Keeps events in arrival order. A closed sink, or one that has reached
    ``max_events``, refuses further events with LogSinkUnavailable.
    """

    def __init__(self, *, max_events: int | None = None) -> None:
        """
        Initialize in-memory sink.

        Args:
            max_events: Capacity (unbounded if None)
        """
        self._events: list[AuditEvent] = []
        self._max_events = max_events
        self._closed = False

    @property
    def events(self) -> list[AuditEvent]:
        """Snapshot of recorded events."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def record(self, event: AuditEvent) -> None:
        if self._closed:
            raise LogSinkUnavailable("memory", "sink is closed")
        if self._max_events is not None and len(self._events) >= self._max_events:
            raise LogSinkUnavailable("memory", f"capacity of {self._max_events} events reached")
        self._events.append(event)

    def clear(self) -> None:
        self._events.clear()

    def close(self) -> None:
        self._closed = True


class LoggingAuditSink:
    """
    Audit sink that forwards events to Python logging as JSON lines.

    Denials and failures are logged at WARNING, everything else at INFO.
    """

    def __init__(
        self,
        *,
        log_level: int = logging.INFO,
        logger_name: str = "aperion_proxy.audit",
    ) -> None:
        """
        Initialize logging sink.

        Args:
            log_level: Python logging level
            logger_name: Name for the Python logger
        """
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(log_level)

    def record(self, event: AuditEvent) -> None:
        self._logger.log(
            logging.WARNING if event.is_failure else logging.INFO,
            event.to_json(),
        )


class NullAuditSink:
    """Discards every event."""

    def record(self, event: AuditEvent) -> None:
        pass
