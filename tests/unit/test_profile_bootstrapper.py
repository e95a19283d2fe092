"""
ProfileBootstrapper tests.

Covers first-bootstrap creation, the create race, tier reconciliation and
self-heal of legacy rows.
"""

from unittest.mock import MagicMock

import pytest

from src.adapters.memory_store import InMemoryProfileStore
from src.components.profile import (
    EnsureProfileInput,
    ProfileBootstrapper,
    SelfHealStatus,
    run_ensure_profile,
    run_self_heal,
)
from src.core.errors import MissingRequiredAttributeError
from src.core.ports.identity import NotAuthenticatedError
from src.core.ports.store import AlreadyExistsError, ConditionFailedError
from src.domain.entities import Identity, IdentityAttributes, PlanTier, SessionClaims

DEMO_USERNAME = "demo+0b0f6a3e-3c1d-4d57-9a55-8f1c2b7e9a10@example.com"


def ensure(store, clock, identity, attributes=None, claims_source=None):
    return run_ensure_profile(
        EnsureProfileInput(identity=identity, attributes=attributes or IdentityAttributes()),
        store,
        clock,
        claims_source,
    )


class StaticClaims:
    def __init__(self, claims: SessionClaims):
        self.claims = claims

    def current_session_claims(self) -> SessionClaims:
        return self.claims


class TestFirstBootstrap:
    def test_creates_default_profile(self, memory_store, clock) -> None:
        result = ensure(
            memory_store,
            clock,
            Identity(id="u1", username="alice"),
            IdentityAttributes(email="a@x.com"),
        )

        assert result.created is True
        profile = memory_store.get("u1")
        assert profile.owner == "u1"
        assert profile.email == "a@x.com"
        assert profile.display_name == "alice"
        assert profile.tier is PlanTier.FREE
        assert profile.seed_version == 0
        assert profile.seeded_at is None
        assert profile.created_at == clock.now_utc()

    def test_demo_identity_gets_demo_tier(self, memory_store, clock) -> None:
        ensure(
            memory_store,
            clock,
            Identity(id="u1", username=DEMO_USERNAME),
            IdentityAttributes(email=DEMO_USERNAME),
        )
        assert memory_store.get("u1").tier is PlanTier.DEMO

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_missing_email_raises(self, memory_store, clock, email) -> None:
        with pytest.raises(MissingRequiredAttributeError) as exc_info:
            ensure(memory_store, clock, Identity(id="u1"), IdentityAttributes(email=email))

        assert exc_info.value.attribute == "email"
        assert memory_store.raw("u1") is None

    def test_lost_create_race_returns_winner(self, make_profile, clock) -> None:
        winner = make_profile("u1", email="winner@x.com")
        store = MagicMock()
        store.get.side_effect = [None, winner]
        store.create.side_effect = AlreadyExistsError("u1")

        result = ensure(store, clock, Identity(id="u1"), IdentityAttributes(email="a@x.com"))

        assert result.created is False
        assert result.profile.email == "winner@x.com"

    def test_lost_create_race_with_nothing_to_read_propagates(self, clock) -> None:
        store = MagicMock()
        store.get.return_value = None
        store.create.side_effect = AlreadyExistsError("u1")

        with pytest.raises(AlreadyExistsError):
            ensure(store, clock, Identity(id="u1"), IdentityAttributes(email="a@x.com"))

    def test_other_create_failures_propagate(self, clock) -> None:
        store = MagicMock()
        store.get.return_value = None
        store.create.side_effect = RuntimeError("network down")

        with pytest.raises(RuntimeError, match="network down"):
            ensure(store, clock, Identity(id="u1"), IdentityAttributes(email="a@x.com"))


class TestExistingProfile:
    def test_is_idempotent(self, memory_store, clock) -> None:
        identity = Identity(id="u1", username="alice")
        attributes = IdentityAttributes(email="a@x.com")

        first = ensure(memory_store, clock, identity, attributes)
        second = ensure(memory_store, clock, identity, attributes)

        assert first.created is True
        assert second.created is False
        assert second.profile.id == first.profile.id
        assert second.healed_fields == ()

    def test_tier_upgraded_to_demo(self, memory_store, clock, make_profile) -> None:
        memory_store.create(make_profile("u1"))

        result = ensure(
            memory_store,
            clock,
            Identity(id="u1", username="alice"),
            claims_source=StaticClaims(SessionClaims(groups={"Demo"})),
        )

        assert result.tier_updated is True
        assert memory_store.get("u1").tier is PlanTier.DEMO

    def test_pro_is_never_downgraded(self, memory_store, clock, make_profile) -> None:
        memory_store.create(make_profile("u1", tier=PlanTier.PRO))

        result = ensure(memory_store, clock, Identity(id="u1", username=DEMO_USERNAME))

        assert result.tier_updated is False
        assert memory_store.get("u1").tier is PlanTier.PRO
        assert all("tier" not in changes for _, changes in memory_store.update_calls)

    def test_tier_update_failure_is_swallowed(self, make_profile, clock) -> None:
        store = MagicMock()
        store.get.return_value = make_profile("u1")
        store.update.side_effect = RuntimeError("throttled")

        result = ensure(store, clock, Identity(id="u1", username=DEMO_USERNAME))

        assert result.tier_updated is False
        assert result.profile.id == "u1"

    def test_heals_legacy_row(self, memory_store, clock, legacy_doc) -> None:
        memory_store.put_raw(legacy_doc("u1", email=None))

        result = ensure(
            memory_store,
            clock,
            Identity(id="u1", username="alice"),
            IdentityAttributes(email="a@x.com"),
        )

        assert result.created is False
        assert set(result.healed_fields) == {"email", "display_name"}
        assert result.profile.email is None  # as read, before the repair
        healed = memory_store.get("u1")
        assert healed.email == "a@x.com"
        assert healed.display_name == "alice"

    def test_healed_field_not_rewritten_on_second_call(self, memory_store, clock, legacy_doc) -> None:
        memory_store.put_raw(legacy_doc("u1", display_name=""))
        identity = Identity(id="u1", username="alice")
        attributes = IdentityAttributes(email="a@x.com")

        ensure(memory_store, clock, identity, attributes)
        second = ensure(
            memory_store, clock, Identity(id="u1", username="renamed"), attributes
        )

        assert second.self_heal["display_name"] is SelfHealStatus.ALREADY_SET
        assert memory_store.get("u1").display_name == "alice"

    def test_not_authenticated_from_claims_propagates(self, memory_store, clock, make_profile) -> None:
        memory_store.create(make_profile("u1"))
        source = MagicMock()
        source.current_session_claims.side_effect = NotAuthenticatedError()

        with pytest.raises(NotAuthenticatedError):
            ensure(memory_store, clock, Identity(id="u1", username="alice"), claims_source=source)


class TestSelfHeal:
    def test_empty_candidate_is_noop(self) -> None:
        store = MagicMock()
        assert run_self_heal(store, "u1", "email", "   ") is SelfHealStatus.SKIPPED
        assert run_self_heal(store, "u1", "email", None) is SelfHealStatus.SKIPPED
        store.update.assert_not_called()

    def test_condition_failure_is_success(self) -> None:
        store = MagicMock()
        store.update.side_effect = ConditionFailedError("u1")
        assert run_self_heal(store, "u1", "email", "a@x.com") is SelfHealStatus.ALREADY_SET

    def test_other_failures_are_logged(self, caplog) -> None:
        store = MagicMock()
        store.update.side_effect = RuntimeError("throttled")

        with caplog.at_level("WARNING"):
            status = run_self_heal(store, "u1", "email", "a@x.com")

        assert status is SelfHealStatus.FAILED
        assert "throttled" in caplog.text

    def test_never_masks_not_authenticated(self) -> None:
        store = MagicMock()
        store.update.side_effect = NotAuthenticatedError()
        with pytest.raises(NotAuthenticatedError):
            run_self_heal(store, "u1", "email", "a@x.com")

    def test_writes_trimmed_value(self, legacy_doc) -> None:
        store = InMemoryProfileStore()
        store.put_raw(legacy_doc("u1"))
        assert run_self_heal(store, "u1", "email", "  a@x.com ") is SelfHealStatus.HEALED
        assert store.raw("u1")["email"] == "a@x.com"


class TestProfileBootstrapper:
    def test_wrapper_delegates(self, memory_store, clock) -> None:
        bootstrapper = ProfileBootstrapper(memory_store, clock)
        result = bootstrapper.ensure_profile(
            Identity(id="u1", username="alice"), IdentityAttributes(email="a@x.com")
        )
        assert result.created is True

    def test_self_heal_rejects_other_fields(self, memory_store, clock) -> None:
        bootstrapper = ProfileBootstrapper(memory_store, clock)
        with pytest.raises(ValueError):
            bootstrapper.self_heal("u1", "tier", "PRO")
