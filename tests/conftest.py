"""Shared test doubles."""

from __future__ import annotations

from collections import Counter

import pytest

from aperion_proxy.core.resource import LoaderSettings, RealResource

INSTANT = LoaderSettings(load_delay=0)


class CountingFactory:
    """RealResource factory that counts constructions."""

    def __init__(self, *, fail_times: int = 0) -> None:
        self.constructed = 0
        self.attempts = 0
        self._fail_times = fail_times

    def __call__(self, identifier: str) -> RealResource:
        self.attempts += 1
        if self.attempts <= self._fail_times:
            raise OSError("storage offline")
        resource = RealResource(identifier, settings=INSTANT)
        self.constructed += 1
        return resource


class RecordingResource:
    """Resource that records which capabilities reached it."""

    def __init__(self, identifier: str = "fake-doc") -> None:
        self.calls: Counter[str] = Counter()
        self._inner = RealResource(identifier, settings=INSTANT)

    def view(self) -> str:
        self.calls["view"] += 1
        return self._inner.view()

    def mutate(self, content: str) -> None:
        self.calls["mutate"] += 1
        self._inner.mutate(content)

    def remove(self) -> None:
        self.calls["remove"] += 1
        self._inner.remove()

    def describe(self) -> str:
        self.calls["describe"] += 1
        return self._inner.describe()


@pytest.fixture
def counting_factory() -> CountingFactory:
    """Factory counting RealResource constructions."""
    return CountingFactory()


@pytest.fixture
def recording_resource() -> RecordingResource:
    """Resource recording the calls that reach it."""
    return RecordingResource()


@pytest.fixture
def failing_factory() -> CountingFactory:
    """Factory whose first construction attempt fails."""
    return CountingFactory(fail_times=1)
