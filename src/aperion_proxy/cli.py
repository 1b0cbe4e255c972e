"""
Demonstration entry point.

Runs the document-proxy scenarios one after another and prints each
operation's result or error, followed by the audit trail. There are no
flags: roles, actors and identifiers are fixed below.

Usage:
    python -m aperion_proxy

    # Skip the simulated load time
    APERION_PROXY_LOAD_DELAY=0 python -m aperion_proxy
"""

from __future__ import annotations

import logging
import sys

from aperion_proxy.audit import InMemoryAuditSink
from aperion_proxy.chain import (
    DEFAULT_SEQUENCE,
    AuditSpec,
    AuthorizationSpec,
    ChainDriver,
    ChainSpec,
    LazySpec,
    build_chain,
)
from aperion_proxy.core.resource import Capability, LoaderSettings, RealResource

SCENARIOS: list[tuple[str, ChainSpec]] = [
    (
        "Lazy loading",
        ChainSpec(links=[LazySpec(identifier="document1.pdf")]),
    ),
    (
        "Protection (VIEWER)",
        ChainSpec(links=[AuthorizationSpec(role="VIEWER"), LazySpec(identifier="document2.pdf")]),
    ),
    (
        "Audit logging",
        ChainSpec(links=[AuditSpec(actor_id="user123"), LazySpec(identifier="document3.pdf")]),
    ),
    (
        "Combined: audit -> authorization -> lazy (EDITOR)",
        ChainSpec(
            links=[
                AuditSpec(actor_id="user456"),
                AuthorizationSpec(role="EDITOR"),
                LazySpec(identifier="secret.pdf"),
            ]
        ),
    ),
    (
        "Reversed: authorization -> audit -> lazy (EDITOR)",
        ChainSpec(
            links=[
                AuthorizationSpec(role="EDITOR"),
                AuditSpec(actor_id="user456"),
                LazySpec(identifier="secret.pdf"),
            ]
        ),
    ),
]


def run_scenario(title: str, spec: ChainSpec, settings: LoaderSettings) -> None:
    """Build one chain, run the default sequence and print the outcome."""
    sink = InMemoryAuditSink()
    chain = build_chain(spec, audit_sink=sink, settings=settings)
    driver = ChainDriver(chain)

    print(f"=== {title} ===")
    for result in driver.run(DEFAULT_SEQUENCE):
        print(f"  {result.describe_line()}")
    # Proves whether a denied remove had any effect
    print(f"  {driver.invoke(Capability.VIEW).describe_line()}")

    if len(sink):
        print("  audit trail:")
        for event in sink.events:
            line = f"    {event.actor_id} {event.operation.value} -> {event.outcome.value}"
            if event.error_kind:
                line += f" ({event.error_kind})"
            print(line)
    print()


def run_eager(settings: LoaderSettings) -> None:
    """Same combined chain, but over an eagerly loaded document."""
    sink = InMemoryAuditSink()
    spec = ChainSpec(links=[AuditSpec(actor_id="user456"), AuthorizationSpec(role="ADMIN")])
    chain = build_chain(
        spec,
        terminal=lambda: RealResource("test.pdf", settings=settings),
        audit_sink=sink,
    )

    print("=== Eager: audit -> authorization (ADMIN) -> real ===")
    for result in ChainDriver(chain).run(DEFAULT_SEQUENCE):
        print(f"  {result.describe_line()}")
    print()


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = LoaderSettings.from_env()

    for title, spec in SCENARIOS:
        run_scenario(title, spec, settings)
    run_eager(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
