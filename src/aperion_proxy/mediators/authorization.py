"""
Authorization Mediator.

Checks every capability call against the permission table before it is
allowed to reach the next link. A denied call never reaches the wrapped
resource.
"""

from __future__ import annotations

import logging

from aperion_proxy.core.correlation import CorrelatedLogger
from aperion_proxy.core.errors import Denied
from aperion_proxy.core.resource import Capability, Resource
from aperion_proxy.engines.policy import PolicyEngine, Role

logger = CorrelatedLogger(logging.getLogger(__name__), link="authorization")


class AuthorizationMediator:
    """
    Protection proxy enforcing role-based permissions.

    Usage:
        doc = AuthorizationMediator(RealResource("report.pdf"), Role.VIEWER)
        doc.view()           # allowed
        doc.mutate("text")   # raises Denied
    """

    def __init__(
        self,
        resource: Resource,
        role: Role | str,
        *,
        policy: PolicyEngine | None = None,
    ) -> None:
        """
        Initialize authorization mediator.

        Args:
            resource: Next link in the chain
            role: Role the caller acts as
            policy: Policy engine (default permission table if None)

        Raises:
            ValueError: If role is not a known role
        """
        self._resource = resource
        self._role = Role.parse(role)
        self._policy = policy or PolicyEngine()

    @property
    def role(self) -> Role:
        return self._role

    def _check(self, capability: Capability) -> None:
        decision = self._policy.evaluate(self._role, capability)
        if not decision.allowed:
            logger.warning("Access denied: %s", decision.reason)
            raise Denied(self._role.value, capability.value, decision.reason)
        logger.debug("Access allowed: %s", decision.reason)

    def view(self) -> str:
        self._check(Capability.VIEW)
        return self._resource.view()

    def mutate(self, content: str) -> None:
        self._check(Capability.MUTATE)
        self._resource.mutate(content)

    def remove(self) -> None:
        self._check(Capability.REMOVE)
        self._resource.remove()

    def describe(self) -> str:
        self._check(Capability.DESCRIBE)
        return self._resource.describe()
