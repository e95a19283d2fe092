from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from src.components.profile import (
    IdentityConfig,
    build_default_profile,
    is_demo_identity_username,
    pick_display_name,
    resolve_desired_tier,
)
from src.core.ports.identity import NotAuthenticatedError
from src.domain.entities import Identity, IdentityAttributes, PlanTier, SessionClaims

DEMO_USERNAME = "demo+0b0f6a3e-3c1d-4d57-9a55-8f1c2b7e9a10@example.com"


def claims_source(claims: SessionClaims | None = None, error: Exception | None = None):
    source = MagicMock()
    if error is not None:
        source.current_session_claims.side_effect = error
    else:
        source.current_session_claims.return_value = claims or SessionClaims()
    return source


class TestDemoUsername:
    @pytest.mark.parametrize(
        "username",
        [DEMO_USERNAME, DEMO_USERNAME.upper().replace("DEMO+", "Demo+")],
    )
    def test_matches(self, username: str) -> None:
        assert is_demo_identity_username(username)

    @pytest.mark.parametrize(
        "username",
        [
            None,
            "",
            "alice",
            "demo@example.com",
            "demo+not-a-uuid@example.com",
            "xdemo+0b0f6a3e-3c1d-4d57-9a55-8f1c2b7e9a10@example.com",
        ],
    )
    def test_rejects(self, username) -> None:
        assert not is_demo_identity_username(username)

    def test_custom_pattern(self) -> None:
        config = IdentityConfig(demo_username_pattern=r"^trial-")
        assert is_demo_identity_username("trial-42", config)
        assert not is_demo_identity_username(DEMO_USERNAME, config)


class TestResolveDesiredTier:
    def test_demo_username_wins_without_reading_claims(self) -> None:
        source = claims_source()
        tier = resolve_desired_tier(Identity(id="u1", username=DEMO_USERNAME), source)

        assert tier is PlanTier.DEMO
        source.current_session_claims.assert_not_called()

    @pytest.mark.parametrize(
        "claims",
        [SessionClaims(groups={"Demo"}), SessionClaims(role="Demo")],
    )
    def test_demo_claims(self, claims: SessionClaims) -> None:
        tier = resolve_desired_tier(Identity(id="u1", username="alice"), claims_source(claims))
        assert tier is PlanTier.DEMO

    def test_plain_identity_is_free(self) -> None:
        tier = resolve_desired_tier(
            Identity(id="u1", username="alice"),
            claims_source(SessionClaims(groups={"Admin"})),
        )
        assert tier is PlanTier.FREE

    def test_no_claims_source_is_free(self) -> None:
        assert resolve_desired_tier(Identity(id="u1", username="alice")) is PlanTier.FREE

    def test_claims_failure_is_swallowed(self) -> None:
        tier = resolve_desired_tier(
            Identity(id="u1", username="alice"),
            claims_source(error=RuntimeError("token refresh failed")),
        )
        assert tier is PlanTier.FREE

    def test_not_authenticated_propagates(self) -> None:
        with pytest.raises(NotAuthenticatedError):
            resolve_desired_tier(
                Identity(id="u1", username="alice"),
                claims_source(error=NotAuthenticatedError()),
            )

    def test_never_pro(self) -> None:
        tier = resolve_desired_tier(
            Identity(id="u1", username="alice"),
            claims_source(SessionClaims(groups={"PRO", "Pro"}, role="PRO")),
        )
        assert tier is PlanTier.FREE


class TestPickDisplayName:
    def test_username_first(self) -> None:
        name = pick_display_name(
            Identity(id="u1", username="  alice  "),
            IdentityAttributes(preferred_username="ally", name="Alice A", email="a@x.com"),
        )
        assert name == "alice"

    def test_preferred_username_then_name(self) -> None:
        identity = Identity(id="u1", username="   ")
        assert pick_display_name(identity, IdentityAttributes(preferred_username="ally", name="Alice")) == "ally"
        assert pick_display_name(identity, IdentityAttributes(name=" Alice A ")) == "Alice A"

    def test_email_local_part(self) -> None:
        assert pick_display_name(Identity(id="u1"), IdentityAttributes(email="a.b@x.com")) == "a.b"

    def test_email_without_at_is_ignored(self) -> None:
        assert pick_display_name(Identity(id="u1"), IdentityAttributes(email="not-an-email")) == ""

    def test_nothing_usable(self) -> None:
        assert pick_display_name(Identity(id="u1"), IdentityAttributes()) == ""


def test_build_default_profile() -> None:
    now = datetime(2026, 1, 12, tzinfo=UTC)
    profile = build_default_profile(
        Identity(id="u1", username="alice"),
        IdentityAttributes(email=" a@x.com "),
        PlanTier.FREE,
        now,
    )

    assert profile.id == "u1"
    assert profile.owner == "u1"
    assert profile.email == "a@x.com"
    assert profile.display_name == "alice"
    assert profile.seed_version == 0
    assert profile.seeded_at is None
    assert profile.tier is PlanTier.FREE
    assert profile.default_visibility == "PRIVATE"
    assert profile.created_at == now
    assert profile.updated_at == now
    assert profile.avatar_url is None
