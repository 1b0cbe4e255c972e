"""
Resource Contract and the Real Document.

Defines the capability set every link in a mediator chain must satisfy,
and RealResource, the expensive-to-load document that holds actual state.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, runtime_checkable

from aperion_proxy.core.correlation import CorrelatedLogger
from aperion_proxy.core.errors import ConstructionFailed, NotFound

logger = CorrelatedLogger(logging.getLogger(__name__), link="real")


class Capability(str, Enum):
    """Operations in the Resource contract."""

    VIEW = "view"
    MUTATE = "mutate"
    REMOVE = "remove"
    DESCRIBE = "describe"


@runtime_checkable
class Resource(Protocol):
    """
    Protocol implemented by the real resource and by every mediator.

    Mediators hold a value of this type, so they can wrap each other or the
    real resource interchangeably.
    """

    def view(self) -> str:
        """Return current content. Raises NotFound once removed."""
        ...

    def mutate(self, content: str) -> None:
        """Replace content. Raises NotFound once removed, Denied if unauthorized."""
        ...

    def remove(self) -> None:
        """Remove content. Idempotent. Raises Denied if unauthorized."""
        ...

    def describe(self) -> str:
        """Return metadata derived from the identifier alone."""
        ...


def describe_identifier(identifier: str) -> str:
    """Metadata line for a resource identifier."""
    return f"Metadata: {identifier}"


def default_loader(identifier: str) -> str:
    """Initial content of a freshly loaded document."""
    return f"Content of {identifier}"


@dataclass(frozen=True)
class LoaderSettings:
    """Settings for the simulated expensive load."""

    load_delay: float = 2.0

    @classmethod
    def from_env(cls, env_var: str = "APERION_PROXY_LOAD_DELAY") -> LoaderSettings:
        """
        Load settings from the environment.

        Args:
            env_var: Environment variable holding the delay in seconds

        Returns:
            Settings, with defaults for anything not set

        Raises:
            ValueError: If the delay is not a non-negative number
        """
        raw = os.environ.get(env_var)
        if not raw:
            return cls()

        try:
            delay = float(raw)
        except ValueError:
            raise ValueError(f"{env_var} must be a number of seconds, got {raw!r}") from None

        if delay < 0:
            raise ValueError(f"{env_var} must not be negative, got {delay}")
        return cls(load_delay=delay)


class RealResource:
    """
    The concrete document.

    Construction blocks for ``settings.load_delay`` seconds to simulate loading
    from slow storage. That cost is why LazyResourceMediator exists.
    """

    def __init__(
        self,
        identifier: str,
        *,
        settings: LoaderSettings | None = None,
        loader: Callable[[str], str] = default_loader,
    ) -> None:
        """
        Load the document.

        Args:
            identifier: Document identifier (e.g. a filename)
            settings: Loader settings (defaults apply if None)
            loader: Produces the initial content for an identifier

        Raises:
            ConstructionFailed: If the loader fails
        """
        self._identifier = identifier
        self._settings = settings or LoaderSettings()
        self._content: str | None = self._load(loader)

    def _load(self, loader: Callable[[str], str]) -> str:
        logger.info("Loading document: %s", self._identifier)
        if self._settings.load_delay:
            time.sleep(self._settings.load_delay)

        try:
            content = loader(self._identifier)
        except ConstructionFailed:
            raise
        except Exception as exc:
            raise ConstructionFailed(self._identifier, str(exc) or type(exc).__name__) from exc

        logger.info("Document loaded: %s", self._identifier)
        return content

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def content(self) -> str | None:
        """Current content, None once removed."""
        return self._content

    @property
    def is_removed(self) -> bool:
        return self._content is None

    def view(self) -> str:
        if self._content is None:
            raise NotFound(self._identifier, Capability.VIEW.value)
        logger.info("Viewing document: %s", self._identifier)
        return self._content

    def mutate(self, content: str) -> None:
        if self._content is None:
            raise NotFound(self._identifier, Capability.MUTATE.value)
        logger.info("Editing document: %s", self._identifier)
        self._content = content

    def remove(self) -> None:
        logger.info("Deleting document: %s", self._identifier)
        self._content = None

    def describe(self) -> str:
        return describe_identifier(self._identifier)

    def __repr__(self) -> str:
        return f"RealResource(identifier={self._identifier!r}, removed={self.is_removed})"
