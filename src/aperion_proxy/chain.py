"""
Chain Composition for Aperion Proxy.

Builds mediator chains from declarative link specs and drives capability
calls through the outermost link.

Links are listed outermost first:

    spec = ChainSpec(links=[
        AuditSpec(actor_id="alice"),
        AuthorizationSpec(role="EDITOR"),
        LazySpec(identifier="doc-1"),
    ])
    chain = build_chain(spec, audit_sink=sink)
    results = ChainDriver(chain).run(DEFAULT_SEQUENCE)

Order matters for what gets observed, not for correctness: an audit link
above the authorization link records denied attempts, one below it only
sees calls that were let through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Callable, Literal, Sequence, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from aperion_proxy.audit import AuditSink
from aperion_proxy.core.correlation import correlation_context
from aperion_proxy.core.errors import MediationError
from aperion_proxy.core.resource import Capability, LoaderSettings, RealResource, Resource
from aperion_proxy.engines.policy import PolicyEngine, Role
from aperion_proxy.mediators.audit import AuditMediator
from aperion_proxy.mediators.authorization import AuthorizationMediator
from aperion_proxy.mediators.lazy import LazyResourceMediator


class AuditSpec(BaseModel):
    """Audit link: records every attempt made through it."""

    model_config = {"frozen": True}

    kind: Literal["audit"] = "audit"
    actor_id: str = Field(..., min_length=1, description="Actor recorded on each event")


class AuthorizationSpec(BaseModel):
    """Authorization link: enforces the permission table for one role."""

    model_config = {"frozen": True}

    kind: Literal["authorization"] = "authorization"
    role: Role = Field(..., description="Role the caller acts as")

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Role.parse(value)
        return value


class LazySpec(BaseModel):
    """Lazy link: loads the resource on first use. Always innermost."""

    model_config = {"frozen": True}

    kind: Literal["lazy"] = "lazy"
    identifier: str = Field(..., min_length=1, description="Identifier of the resource to load")


MediatorSpec = Annotated[
    Union[AuditSpec, AuthorizationSpec, LazySpec],
    Field(discriminator="kind"),
]


class ChainSpec(BaseModel):
    """Ordered list of links, outermost first."""

    model_config = {"frozen": True}

    links: list[MediatorSpec] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _lazy_is_innermost(self) -> ChainSpec:
        lazy_positions = [i for i, link in enumerate(self.links) if isinstance(link, LazySpec)]
        if len(lazy_positions) > 1:
            raise ValueError("a chain can contain at most one lazy link")
        if lazy_positions and lazy_positions[0] != len(self.links) - 1:
            raise ValueError("the lazy link must be the innermost link")
        return self

    @property
    def is_lazy(self) -> bool:
        return isinstance(self.links[-1], LazySpec)


def build_chain(
    spec: ChainSpec | Sequence[AuditSpec | AuthorizationSpec | LazySpec],
    *,
    terminal: Callable[[], Resource] | None = None,
    audit_sink: AuditSink | None = None,
    policy: PolicyEngine | None = None,
    settings: LoaderSettings | None = None,
    factory: Callable[[str], RealResource] | None = None,
) -> Resource:
    """
    Assemble a mediator chain.

    Args:
        spec: Chain spec, or a plain sequence of link specs (outermost first)
        terminal: Produces the innermost resource when the chain has no lazy link
        audit_sink: Sink shared by every audit link (each gets its own if None)
        policy: Policy engine shared by every authorization link
        settings: Loader settings for the lazy link (chains with a lazy link only)
        factory: RealResource factory for the lazy link (chains with a lazy link only)

    Returns:
        The outermost link

    Raises:
        ValueError: If the chain has no lazy link and either no terminal
            strategy was given, or settings or factory were given
    """
    if not isinstance(spec, ChainSpec):
        spec = ChainSpec(links=list(spec))

    links = list(spec.links)
    innermost = links[-1]

    chain: Resource
    if isinstance(innermost, LazySpec):
        links.pop()
        chain = LazyResourceMediator(innermost.identifier, factory=factory, settings=settings)
    elif terminal is None:
        raise ValueError("chain has no lazy link; a terminal strategy is required")
    elif settings is not None or factory is not None:
        raise ValueError("settings and factory apply to a lazy link, but the chain has none")
    else:
        chain = terminal()

    for link in reversed(links):
        if isinstance(link, AuditSpec):
            chain = AuditMediator(chain, link.actor_id, sink=audit_sink)
        elif isinstance(link, AuthorizationSpec):
            chain = AuthorizationMediator(chain, link.role, policy=policy)

    return chain


@dataclass
class OperationResult:
    """
    Outcome of one capability call made through a chain.

    Contains either the returned value or the error kind and message.
    """

    operation: Capability
    ok: bool
    value: Any = None
    error_kind: str | None = None
    error_message: str | None = None

    def describe_line(self) -> str:
        """One-line human readable form."""
        if not self.ok:
            return f"{self.operation.value}: {self.error_kind}: {self.error_message}"
        if self.value is None:
            return f"{self.operation.value}: ok"
        return f"{self.operation.value}: {self.value}"


Step = tuple[Capability, tuple[Any, ...]]

DEFAULT_SEQUENCE: tuple[Step, ...] = (
    (Capability.DESCRIBE, ()),
    (Capability.VIEW, ()),
    (Capability.MUTATE, ("New content",)),
    (Capability.REMOVE, ()),
)


class ChainDriver:
    """
    Invokes capabilities on the outermost link of a chain.

    Chain errors are reported as results, verbatim. Nothing is retried.
    """

    def __init__(self, chain: Resource) -> None:
        self._chain = chain

    @property
    def chain(self) -> Resource:
        return self._chain

    def invoke(self, capability: Capability | str, *args: Any) -> OperationResult:
        """
        Call one capability.

        Args:
            capability: Capability to call
            *args: Arguments for the capability (content for mutate)

        Returns:
            OperationResult with the value or the error kind
        """
        capability = Capability(capability)
        method = getattr(self._chain, capability.value)

        with correlation_context():
            try:
                value = method(*args)
            except MediationError as exc:
                return OperationResult(
                    operation=capability,
                    ok=False,
                    error_kind=exc.kind,
                    error_message=exc.message,
                )

        return OperationResult(operation=capability, ok=True, value=value)

    def run(self, steps: Sequence[Step] = DEFAULT_SEQUENCE) -> list[OperationResult]:
        """Run steps in order, collecting every result."""
        return [self.invoke(capability, *args) for capability, args in steps]
