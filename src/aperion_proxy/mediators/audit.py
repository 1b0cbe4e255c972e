"""
Audit Mediator.

Records exactly one audit event per call attempt, whatever the outcome
downstream. Auditing observes calls; it never blocks, alters, or replaces
them, and a broken sink never fails the call being audited.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from aperion_proxy.audit import AuditEvent, AuditOutcome, AuditSink, InMemoryAuditSink
from aperion_proxy.core.correlation import CorrelatedLogger, ensure_correlation
from aperion_proxy.core.errors import LogSinkUnavailable, MediationError
from aperion_proxy.core.resource import Capability, Resource

logger = CorrelatedLogger(logging.getLogger(__name__), link="audit")

T = TypeVar("T")


class AuditMediator:
    """
    Logging proxy recording who attempted what, and how it went.

    Usage:
        sink = InMemoryAuditSink()
        doc = AuditMediator(LazyResourceMediator("report.pdf"), "user123", sink=sink)
        doc.view()
        sink.events[0].outcome  # AuditOutcome.SUCCESS
    """

    def __init__(
        self,
        resource: Resource,
        actor_id: str,
        *,
        sink: AuditSink | None = None,
    ) -> None:
        """
        Initialize audit mediator.

        Args:
            resource: Next link in the chain
            actor_id: Identity recorded on every event
            sink: Destination for events (in-memory if None)
        """
        self._resource = resource
        self._actor_id = actor_id
        self._sink: AuditSink = sink if sink is not None else InMemoryAuditSink()
        self._dropped_events = 0

    @property
    def actor_id(self) -> str:
        return self._actor_id

    @property
    def sink(self) -> AuditSink:
        return self._sink

    @property
    def dropped_events(self) -> int:
        """Number of events the sink refused or failed to record."""
        return self._dropped_events

    def _record(self, event: AuditEvent) -> None:
        try:
            self._sink.record(event)
        except LogSinkUnavailable as exc:
            self._dropped_events += 1
            logger.warning("Audit event dropped for %s: %s", event.operation.value, exc.message)
        except Exception as exc:
            self._dropped_events += 1
            logger.warning(
                "Audit event dropped for %s: sink failed with %s: %s",
                event.operation.value,
                type(exc).__name__,
                exc,
            )

    def _audited(self, capability: Capability, call: Callable[[], T], **details: Any) -> T:
        with ensure_correlation() as cid:
            event = AuditEvent(
                actor_id=self._actor_id,
                operation=capability,
                correlation_id=cid,
                details=details,
            )
            logger.debug("%s is attempting %s", self._actor_id, capability.value)

            try:
                result = call()
            except MediationError as exc:
                self._record(
                    event.complete(
                        AuditOutcome.from_error_kind(exc.kind),
                        error_kind=exc.kind,
                        error_message=exc.message,
                    )
                )
                raise
            except Exception as exc:
                self._record(
                    event.complete(
                        AuditOutcome.ERROR,
                        error_kind=type(exc).__name__,
                        error_message=str(exc),
                    )
                )
                raise

            self._record(event.complete(AuditOutcome.SUCCESS))
            return result

    def view(self) -> str:
        return self._audited(Capability.VIEW, self._resource.view)

    def mutate(self, content: str) -> None:
        self._audited(
            Capability.MUTATE,
            lambda: self._resource.mutate(content),
            content_length=len(content),
        )

    def remove(self) -> None:
        self._audited(Capability.REMOVE, self._resource.remove)

    def describe(self) -> str:
        return self._audited(Capability.DESCRIBE, self._resource.describe)
