"""
Concurrency tests.

Many threads race for the same seed claim or the same first bootstrap; the
store's conditional write must pick exactly one winner.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.adapters.auth.identity import StaticIdentityProvider
from src.adapters.dev_seed import DevSeedContent
from src.components.bootstrap import BootstrapInput, run_bootstrap, run_reset_and_reseed
from src.components.profile import EnsureProfileInput, run_ensure_profile
from src.core.ports.store import ConditionFailedError, all_of, less_than, not_equals
from src.domain.entities import Identity, IdentityAttributes

WORKERS = 8


def race(n: int, fn):
    """Run fn(i) in n threads released at the same moment; return results or exceptions."""
    barrier = threading.Barrier(n)

    def run(i: int):
        barrier.wait()
        try:
            return fn(i)
        except Exception as e:
            return e

    with ThreadPoolExecutor(max_workers=n) as pool:
        return list(pool.map(run, range(n)))


def test_exactly_one_claim_wins(store, make_profile) -> None:
    store.create(make_profile("u1"))
    claim = all_of(less_than("seed_version", 1), not_equals("seed_version", -1))

    results = race(WORKERS, lambda _: store.update("u1", {"seed_version": -1}, condition=claim))

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == WORKERS - 1
    assert all(isinstance(e, ConditionFailedError) for e in losers)
    assert store.get("u1").seed_version == -1


def test_concurrent_bootstraps_seed_once(store, clock) -> None:
    content = DevSeedContent(delay_seconds=0.05)

    def bootstrap(_: int):
        provider = StaticIdentityProvider(
            Identity(id="u1", username="alice"), IdentityAttributes(email="a@x.com")
        )
        return run_bootstrap(BootstrapInput(want_seed=True), provider, store, content, clock)

    results = race(WORKERS, bootstrap)

    errors = [r for r in results if isinstance(r, Exception)]
    assert errors == []
    assert sum(r.did_seed_demo for r in results) == 1
    assert sum(r.created for r in results) == 1
    assert content.call_count == 1
    assert store.get("u1").seed_version == 1


def test_concurrent_first_bootstrap_creates_one_profile(store, clock) -> None:
    def ensure(i: int):
        return run_ensure_profile(
            EnsureProfileInput(
                identity=Identity(id="u1", username=f"user{i}"),
                attributes=IdentityAttributes(email=f"u{i}@x.com"),
            ),
            store,
            clock,
        )

    results = race(WORKERS, ensure)

    assert all(not isinstance(r, Exception) for r in results)
    assert sum(r.created for r in results) == 1
    assert len({r.profile.id for r in results}) == 1


@pytest.mark.parametrize("failures", [1, 3])
def test_populate_failures_release_claim_for_next_attempt(store, clock, failures) -> None:
    provider = StaticIdentityProvider(
        Identity(id="u1", username="alice"), IdentityAttributes(email="a@x.com")
    )
    failing = DevSeedContent(fail_with=RuntimeError("populate failed"))

    for _ in range(failures):
        with pytest.raises(RuntimeError):
            run_bootstrap(BootstrapInput(want_seed=True), provider, store, failing, clock)
        assert store.get("u1").seed_version == 0

    ok = DevSeedContent()
    result = run_bootstrap(BootstrapInput(want_seed=True), provider, store, ok, clock)
    assert result.did_seed_demo is True
    assert ok.call_count == 1


def test_reset_racing_bootstraps_reseeds_once(store, clock, provider) -> None:
    run_bootstrap(BootstrapInput(want_seed=True), provider, store, DevSeedContent(), clock)
    content = DevSeedContent(delay_seconds=0.02)

    def reset_or_bootstrap(i: int):
        if i == 0:
            return run_reset_and_reseed(provider, store, content, clock)
        return run_bootstrap(BootstrapInput(want_seed=True), provider, store, content, clock)

    results = race(WORKERS, reset_or_bootstrap)

    assert [r for r in results if isinstance(r, Exception)] == []
    assert content.call_count == 1
    assert sum(r.did_seed_demo for r in results) == 1
    assert store.get("u1").seed_version == 1
