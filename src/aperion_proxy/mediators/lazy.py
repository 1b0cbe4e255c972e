"""
Lazy Resource Mediator.

Defers loading of a RealResource until a capability actually needs it.
describe() is answered from the identifier and never triggers a load.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import Callable

from aperion_proxy.core.correlation import CorrelatedLogger
from aperion_proxy.core.errors import ConstructionFailed
from aperion_proxy.core.resource import (
    Capability,
    LoaderSettings,
    RealResource,
    describe_identifier,
)

logger = CorrelatedLogger(logging.getLogger(__name__), link="lazy")


class LazyState(str, Enum):
    """Lifecycle of a lazy mediator. Transitions only forward."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class LazyResourceMediator:
    """
    Virtual proxy in front of a RealResource.

    This is the one mediator that builds what it wraps, so it holds the
    concrete RealResource type and terminates a chain. The loaded resource
    is owned exclusively and never handed out.

    Usage:
        doc = LazyResourceMediator("report.pdf")
        doc.describe()   # no load
        doc.view()       # loads now, once
    """

    def __init__(
        self,
        identifier: str,
        *,
        factory: Callable[[str], RealResource] | None = None,
        settings: LoaderSettings | None = None,
    ) -> None:
        """
        Initialize lazy mediator.

        Args:
            identifier: Identifier of the resource to load on first use
            factory: Builds the RealResource (defaults to RealResource itself)
            settings: Loader settings passed to the default factory
        """
        self._identifier = identifier
        if factory is None:
            factory = functools.partial(RealResource, settings=settings or LoaderSettings())
        self._factory: Callable[[str], RealResource] = factory
        self._resource: RealResource | None = None

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def state(self) -> LazyState:
        if self._resource is None:
            return LazyState.UNINITIALIZED
        return LazyState.INITIALIZED

    @property
    def is_initialized(self) -> bool:
        return self._resource is not None

    def _materialize(self, capability: Capability) -> RealResource:
        """
        Return the loaded resource, loading it first if needed.

        The reference is only assigned after a successful load, so a failed
        attempt leaves the mediator uninitialized and the next call retries.
        """
        if self._resource is not None:
            return self._resource

        logger.info("Loading %s on first %s", self._identifier, capability.value)
        try:
            resource = self._factory(self._identifier)
        except ConstructionFailed:
            logger.warning("Load of %s failed, staying uninitialized", self._identifier)
            raise
        except Exception as exc:
            logger.warning("Load of %s failed, staying uninitialized", self._identifier)
            raise ConstructionFailed(self._identifier, str(exc) or type(exc).__name__) from exc

        self._resource = resource
        return resource

    def view(self) -> str:
        return self._materialize(Capability.VIEW).view()

    def mutate(self, content: str) -> None:
        self._materialize(Capability.MUTATE).mutate(content)

    def remove(self) -> None:
        self._materialize(Capability.REMOVE).remove()

    def describe(self) -> str:
        return describe_identifier(self._identifier)

    def __repr__(self) -> str:
        return f"LazyResourceMediator(identifier={self._identifier!r}, state={self.state.value})"
