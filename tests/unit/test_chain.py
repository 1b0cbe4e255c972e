"""Tests for chain composition and the driver."""

import pytest
from pydantic import ValidationError

from aperion_proxy.audit import AuditOutcome, InMemoryAuditSink
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
from aperion_proxy.core.resource import Capability, LoaderSettings, RealResource
from aperion_proxy.engines.policy import Role
from aperion_proxy.mediators.audit import AuditMediator
from aperion_proxy.mediators.authorization import AuthorizationMediator
from aperion_proxy.mediators.lazy import LazyResourceMediator

AUDIT_FIRST = [
    AuditSpec(actor_id="alice"),
    AuthorizationSpec(role="EDITOR"),
    LazySpec(identifier="doc-1"),
]
AUTHZ_FIRST = [
    AuthorizationSpec(role="EDITOR"),
    AuditSpec(actor_id="alice"),
    LazySpec(identifier="doc-1"),
]


class TestChainSpec:
    """Tests for ChainSpec validation."""

    def test_parses_dicts(self) -> None:
        """Link specs can be given as plain dicts."""
        spec = ChainSpec.model_validate(
            {
                "links": [
                    {"kind": "audit", "actor_id": "alice"},
                    {"kind": "authorization", "role": "editor"},
                    {"kind": "lazy", "identifier": "doc-1"},
                ]
            }
        )

        assert isinstance(spec.links[0], AuditSpec)
        assert spec.links[1].role is Role.EDITOR
        assert spec.is_lazy is True

    def test_lazy_must_be_innermost(self) -> None:
        """A lazy link above other links is rejected."""
        with pytest.raises(ValidationError, match="innermost"):
            ChainSpec(links=[LazySpec(identifier="doc-1"), AuditSpec(actor_id="alice")])

    def test_single_lazy_link(self) -> None:
        """Two lazy links are rejected."""
        with pytest.raises(ValidationError, match="at most one"):
            ChainSpec(links=[LazySpec(identifier="a"), LazySpec(identifier="b")])

    def test_unknown_role_rejected(self) -> None:
        """Unknown roles fail validation."""
        with pytest.raises(ValidationError):
            AuthorizationSpec(role="OWNER")

    def test_empty_chain_rejected(self) -> None:
        """A chain needs at least one link."""
        with pytest.raises(ValidationError):
            ChainSpec(links=[])


class TestBuildChain:
    """Tests for build_chain."""

    def test_builds_in_order(self, counting_factory) -> None:
        """Links are nested outermost first."""
        chain = build_chain(AUDIT_FIRST, factory=counting_factory)

        assert isinstance(chain, AuditMediator)

        reversed_chain = build_chain(AUTHZ_FIRST, factory=counting_factory)
        assert isinstance(reversed_chain, AuthorizationMediator)

    def test_lazy_only(self, counting_factory) -> None:
        """A single lazy link is a valid chain."""
        chain = build_chain([LazySpec(identifier="doc-1")], factory=counting_factory)

        assert isinstance(chain, LazyResourceMediator)

    def test_terminal_required_without_lazy(self) -> None:
        """Chains without a lazy link need a terminal strategy."""
        with pytest.raises(ValueError, match="terminal"):
            build_chain([AuditSpec(actor_id="alice")])

    @pytest.mark.parametrize(
        "lazy_only",
        [{"settings": LoaderSettings(load_delay=0)}, {"factory": RealResource}],
        ids=["settings", "factory"],
    )
    def test_lazy_options_rejected_without_lazy(self, lazy_only) -> None:
        """Settings and factory cannot be silently dropped on an eager chain."""
        built = []

        def terminal() -> RealResource:
            resource = RealResource("eager.pdf", settings=LoaderSettings(load_delay=0))
            built.append(resource)
            return resource

        with pytest.raises(ValueError, match="lazy link"):
            build_chain([AuditSpec(actor_id="alice")], terminal=terminal, **lazy_only)

        assert built == []

    def test_terminal_strategy(self) -> None:
        """Terminal strategy produces the innermost resource once, eagerly."""
        built = []

        def terminal() -> RealResource:
            resource = RealResource("eager.pdf", settings=LoaderSettings(load_delay=0))
            built.append(resource)
            return resource

        chain = build_chain(
            [AuditSpec(actor_id="alice"), AuthorizationSpec(role="ADMIN")], terminal=terminal
        )

        assert len(built) == 1
        assert chain.view() == "Content of eager.pdf"

    def test_shared_audit_sink(self, counting_factory) -> None:
        """All audit links write to the given sink."""
        sink = InMemoryAuditSink()
        chain = build_chain(
            [AuditSpec(actor_id="outer"), AuditSpec(actor_id="inner"), LazySpec(identifier="d")],
            audit_sink=sink,
            factory=counting_factory,
        )

        ChainDriver(chain).invoke(Capability.VIEW)

        assert [e.actor_id for e in sink.events] == ["inner", "outer"]
        # Both links saw the same attempt
        assert sink.events[0].correlation_id == sink.events[1].correlation_id


class TestChainDriver:
    """Tests for ChainDriver."""

    @pytest.fixture
    def sink(self) -> InMemoryAuditSink:
        """Create in-memory sink."""
        return InMemoryAuditSink()

    def test_end_to_end_scenario(self, counting_factory, sink: InMemoryAuditSink) -> None:
        """Audit(alice) -> Authorization(EDITOR) -> Lazy(doc-1)."""
        driver = ChainDriver(build_chain(AUDIT_FIRST, audit_sink=sink, factory=counting_factory))

        described = driver.invoke(Capability.DESCRIBE)
        assert described.ok is True
        assert "doc-1" in described.value
        assert counting_factory.constructed == 0

        viewed = driver.invoke(Capability.VIEW)
        assert viewed.value == "Content of doc-1"
        assert counting_factory.constructed == 1

        assert driver.invoke(Capability.MUTATE, "new text").ok is True

        removed = driver.invoke(Capability.REMOVE)
        assert removed.ok is False
        assert removed.error_kind == "denied"

        assert driver.invoke(Capability.VIEW).value == "new text"
        assert counting_factory.constructed == 1

        assert [e.outcome for e in sink.events] == [
            AuditOutcome.SUCCESS,
            AuditOutcome.SUCCESS,
            AuditOutcome.SUCCESS,
            AuditOutcome.DENIED,
            AuditOutcome.SUCCESS,
        ]

    @pytest.mark.parametrize("links", [AUDIT_FIRST, AUTHZ_FIRST], ids=["audit-first", "authz-first"])
    def test_describe_only_never_loads(self, counting_factory, links) -> None:
        """describe-only sequences never construct the resource."""
        driver = ChainDriver(build_chain(links, factory=counting_factory))

        for _ in range(3):
            assert driver.invoke(Capability.DESCRIBE).ok is True

        assert counting_factory.constructed == 0

    @pytest.mark.parametrize("links", [AUDIT_FIRST, AUTHZ_FIRST], ids=["audit-first", "authz-first"])
    def test_results_independent_of_order(self, counting_factory, links) -> None:
        """Both orderings produce the same results."""
        results = ChainDriver(build_chain(links, factory=counting_factory)).run(DEFAULT_SEQUENCE)

        assert [r.ok for r in results] == [True, True, True, False]
        assert results[3].error_kind == "denied"
        assert counting_factory.constructed == 1

    def test_ordering_changes_what_is_observed(self, counting_factory) -> None:
        """Audit above authorization records denials; audit below does not."""
        above, below = InMemoryAuditSink(), InMemoryAuditSink()

        ChainDriver(
            build_chain(AUDIT_FIRST, audit_sink=above, factory=counting_factory)
        ).invoke(Capability.REMOVE)
        ChainDriver(
            build_chain(AUTHZ_FIRST, audit_sink=below, factory=counting_factory)
        ).invoke(Capability.REMOVE)

        assert [e.outcome for e in above.events] == [AuditOutcome.DENIED]
        assert below.events == []

    def test_remove_idempotent_through_chain(self, counting_factory) -> None:
        """Removing twice succeeds both times; view then reports not found."""
        chain = build_chain(
            [AuditSpec(actor_id="root"), AuthorizationSpec(role="ADMIN"), LazySpec(identifier="d")],
            factory=counting_factory,
        )
        driver = ChainDriver(chain)

        assert driver.invoke(Capability.REMOVE).ok is True
        assert driver.invoke(Capability.VIEW).error_kind == "not_found"
        assert driver.invoke(Capability.REMOVE).ok is True
        assert driver.invoke(Capability.VIEW).error_kind == "not_found"

    def test_construction_failure_reported(self, failing_factory) -> None:
        """Construction failures come back as results and the next call retries."""
        sink = InMemoryAuditSink()
        driver = ChainDriver(build_chain(AUDIT_FIRST, audit_sink=sink, factory=failing_factory))

        first = driver.invoke(Capability.VIEW)
        second = driver.invoke(Capability.VIEW)

        assert first.error_kind == "construction_failed"
        assert second.ok is True
        assert sink.events[0].outcome is AuditOutcome.CONSTRUCTION_FAILED

    def test_invoke_by_name(self, counting_factory) -> None:
        """Capabilities can be named by string."""
        driver = ChainDriver(build_chain(AUDIT_FIRST, factory=counting_factory))

        assert driver.invoke("describe").operation is Capability.DESCRIBE

    def test_unexpected_errors_propagate(self) -> None:
        """Only mediation errors are turned into results."""

        class Exploding:
            def view(self) -> str:
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            ChainDriver(Exploding()).invoke(Capability.VIEW)


class TestOperationResult:
    """Tests for OperationResult formatting."""

    def test_value_line(self) -> None:
        """Successful results show their value."""
        result = OperationResult(operation=Capability.VIEW, ok=True, value="hello")
        assert result.describe_line() == "view: hello"

    def test_void_line(self) -> None:
        """Void successes show ok."""
        result = OperationResult(operation=Capability.MUTATE, ok=True)
        assert result.describe_line() == "mutate: ok"

    def test_error_line(self) -> None:
        """Errors show kind and message verbatim."""
        result = OperationResult(
            operation=Capability.REMOVE,
            ok=False,
            error_kind="denied",
            error_message="Role 'EDITOR' is not permitted to remove",
        )
        assert result.describe_line() == "remove: denied: Role 'EDITOR' is not permitted to remove"
