"""
Policy Engine for Aperion Proxy.

The "May this role do this?" logic: a fixed role-to-capability matrix.
The matrix is total. Every (role, capability) pair resolves to allow or
deny, and nothing passes unchecked.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from aperion_proxy.core.resource import Capability


class Role(str, Enum):
    """Closed set of roles a caller can act as."""

    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """
        Parse a role name, case-insensitively.

        Raises:
            ValueError: If the name is not a known role
        """
        if isinstance(value, Role):
            return value
        known = ", ".join(r.value for r in cls)
        if not isinstance(value, str):
            raise ValueError(f"Unknown role: {value!r} (expected one of {known})")
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r} (expected one of {known})") from None


# Default role-capability matrix
DEFAULT_PERMISSION_TABLE: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),  # All capabilities
    Role.EDITOR: frozenset({Capability.VIEW, Capability.MUTATE, Capability.DESCRIBE}),
    Role.VIEWER: frozenset({Capability.VIEW, Capability.DESCRIBE}),
}


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of a policy evaluation.

    Contains the decision and reasoning for audit purposes.
    """

    allowed: bool
    reason: str
    role: Role
    capability: Capability


class PolicyEngine:
    """
    Role-based permission enforcement.

    The table is injected at construction and frozen, so separate engines
    never share state.

    Usage:
        engine = PolicyEngine()

        if engine.enforce(Role.EDITOR, Capability.MUTATE):
            ...

        # Alternate table for a narrower deployment
        engine = PolicyEngine(permission_table={
            Role.ADMIN: frozenset(Capability),
            Role.EDITOR: frozenset({Capability.VIEW}),
            Role.VIEWER: frozenset(),
        })
    """

    def __init__(
        self,
        *,
        permission_table: Mapping[Role, frozenset[Capability]] | None = None,
    ) -> None:
        """
        Initialize policy engine.

        Args:
            permission_table: Role-capability matrix (uses default if None)

        Raises:
            ValueError: If the table does not cover every role
        """
        table = DEFAULT_PERMISSION_TABLE if permission_table is None else permission_table

        missing = [role.value for role in Role if role not in table]
        if missing:
            raise ValueError(f"Permission table has no entry for roles: {', '.join(missing)}")

        self._table: Mapping[Role, frozenset[Capability]] = MappingProxyType(
            {role: frozenset(table[role]) for role in Role}
        )

    def evaluate(self, role: Role, capability: Capability) -> PolicyDecision:
        """
        Evaluate a (role, capability) pair with full decision details.

        Args:
            role: Role of the caller
            capability: Operation being attempted

        Returns:
            PolicyDecision with allow/deny and reasoning
        """
        if capability in self._table[role]:
            return PolicyDecision(
                allowed=True,
                reason=f"Allowed by role permission: {role.value}",
                role=role,
                capability=capability,
            )

        return PolicyDecision(
            allowed=False,
            reason=f"Role '{role.value}' is not permitted to {capability.value}",
            role=role,
            capability=capability,
        )

    def enforce(self, role: Role, capability: Capability) -> bool:
        """Return True if the role may perform the capability."""
        return self.evaluate(role, capability).allowed

    def permissions_for(self, role: Role) -> frozenset[Capability]:
        """Get all capabilities granted to a role."""
        return self._table[role]

    def as_matrix(self) -> dict[str, dict[str, bool]]:
        """
        Full role x capability grid (for debugging/display).

        Returns:
            {capability: {role: allowed}}
        """
        return {
            capability.value: {role.value: capability in self._table[role] for role in Role}
            for capability in Capability
        }
