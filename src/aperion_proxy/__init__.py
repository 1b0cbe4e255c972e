"""
Aperion Proxy - Composable Access Mediation.

Wraps a protected document in independent mediators (lazy loading,
role-based authorization, audit logging) that stack in any order around
one Resource contract.
"""

from aperion_proxy.core.correlation import (
    CorrelatedLogger,
    correlation_context,
    generate_correlation_id,
    get_correlation_id,
)
from aperion_proxy.core.errors import (
    ConstructionFailed,
    Denied,
    LogSinkUnavailable,
    MediationError,
    NotFound,
)
from aperion_proxy.core.resource import Capability, LoaderSettings, RealResource, Resource
from aperion_proxy.engines.policy import (
    DEFAULT_PERMISSION_TABLE,
    PolicyDecision,
    PolicyEngine,
    Role,
)
from aperion_proxy.audit import (
    AuditEvent,
    AuditOutcome,
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    NullAuditSink,
)
from aperion_proxy.mediators import (
    AuditMediator,
    AuthorizationMediator,
    LazyResourceMediator,
    LazyState,
)
from aperion_proxy.chain import (
    DEFAULT_SEQUENCE,
    AuditSpec,
    AuthorizationSpec,
    ChainDriver,
    ChainSpec,
    LazySpec,
    OperationResult,
    build_chain,
)

__version__ = "0.1.0"

__all__ = [
    # Resource
    "Capability",
    "Resource",
    "RealResource",
    "LoaderSettings",
    # Errors
    "MediationError",
    "NotFound",
    "Denied",
    "ConstructionFailed",
    "LogSinkUnavailable",
    # Correlation
    "correlation_context",
    "get_correlation_id",
    "generate_correlation_id",
    "CorrelatedLogger",
    # Authorization
    "PolicyEngine",
    "PolicyDecision",
    "Role",
    "DEFAULT_PERMISSION_TABLE",
    # Audit
    "AuditEvent",
    "AuditOutcome",
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "NullAuditSink",
    # Mediators
    "LazyResourceMediator",
    "LazyState",
    "AuthorizationMediator",
    "AuditMediator",
    # Composition
    "AuditSpec",
    "AuthorizationSpec",
    "LazySpec",
    "ChainSpec",
    "build_chain",
    "ChainDriver",
    "OperationResult",
    "DEFAULT_SEQUENCE",
]
