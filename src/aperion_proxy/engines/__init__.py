"""Policy Engine."""

from aperion_proxy.engines.policy import (
    DEFAULT_PERMISSION_TABLE,
    PolicyDecision,
    PolicyEngine,
    Role,
)

__all__ = [
    "DEFAULT_PERMISSION_TABLE",
    "PolicyDecision",
    "PolicyEngine",
    "Role",
]
