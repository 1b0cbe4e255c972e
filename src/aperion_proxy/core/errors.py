"""
Error taxonomy for Aperion Proxy.

Every failure a mediator chain can report is one of these kinds.
NotFound, Denied and ConstructionFailed are fatal to the operation and
travel up the chain untouched. LogSinkUnavailable never leaves the
AuditMediator that hit it.
"""

from __future__ import annotations

from typing import Any


class MediationError(Exception):
    """Base class for errors raised inside a mediator chain."""

    kind: str = "mediation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {"kind": self.kind, "message": self.message}


class NotFound(MediationError):
    """Operation attempted on a resource whose content has been removed."""

    kind = "not_found"

    def __init__(self, identifier: str, capability: str) -> None:
        super().__init__(f"Resource '{identifier}' has been removed (attempted: {capability})")
        self.identifier = identifier
        self.capability = capability


class Denied(MediationError):
    """Operation rejected for the caller's role."""

    kind = "denied"

    def __init__(self, role: str, capability: str, reason: str = "") -> None:
        super().__init__(reason or f"Role '{role}' may not {capability}")
        self.role = role
        self.capability = capability


class ConstructionFailed(MediationError):
    """The underlying resource could not be initialized."""

    kind = "construction_failed"

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Failed to load resource '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


class LogSinkUnavailable(MediationError):
    """An audit sink could not accept an event."""

    kind = "log_sink_unavailable"

    def __init__(self, sink: str, reason: str) -> None:
        super().__init__(f"Audit sink '{sink}' unavailable: {reason}")
        self.sink = sink
        self.reason = reason
