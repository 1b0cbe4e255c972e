"""Mediators: lazy loading, authorization and auditing."""

from aperion_proxy.mediators.audit import AuditMediator
from aperion_proxy.mediators.authorization import AuthorizationMediator
from aperion_proxy.mediators.lazy import LazyResourceMediator, LazyState

__all__ = [
    "AuditMediator",
    "AuthorizationMediator",
    "LazyResourceMediator",
    "LazyState",
]
