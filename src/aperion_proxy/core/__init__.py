"""Core resource contract, errors and correlation."""

from aperion_proxy.core.correlation import (
    CorrelatedLogger,
    correlation_context,
    ensure_correlation,
    generate_correlation_id,
    get_correlation_id,
    get_trace_context,
)
from aperion_proxy.core.errors import (
    ConstructionFailed,
    Denied,
    LogSinkUnavailable,
    MediationError,
    NotFound,
)
from aperion_proxy.core.resource import (
    Capability,
    LoaderSettings,
    RealResource,
    Resource,
    describe_identifier,
)

__all__ = [
    # Resource
    "Capability",
    "Resource",
    "RealResource",
    "LoaderSettings",
    "describe_identifier",
    # Errors
    "MediationError",
    "NotFound",
    "Denied",
    "ConstructionFailed",
    "LogSinkUnavailable",
    # Correlation
    "correlation_context",
    "ensure_correlation",
    "get_correlation_id",
    "generate_correlation_id",
    "get_trace_context",
    "CorrelatedLogger",
]
