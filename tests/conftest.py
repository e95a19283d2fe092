from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.auth.identity import StaticIdentityProvider
from src.adapters.clock import FixedClock
from src.adapters.dev_seed import DevSeedContent
from src.adapters.memory_store import InMemoryProfileStore
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteProfileStore
from src.domain.entities import Identity, IdentityAttributes, Profile

FIXED_NOW = datetime(2026, 1, 12, 12, 0, 0, tzinfo=UTC)
DEMO_USERNAME = "demo+0b0f6a3e-3c1d-4d57-9a55-8f1c2b7e9a10@example.com"


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def memory_store(clock):
    return InMemoryProfileStore(time=clock)


@pytest.fixture
def sqlite_store(tmp_path, clock):
    """SQLiteProfileStore on a freshly migrated temporary database."""
    db_path = str(tmp_path / "profiles.db")
    SQLiteMigrator(db_path).run_migrations()
    return SQLiteProfileStore(db_path, time=clock)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, memory_store, tmp_path, clock):
    """Both store adapters; tests using it must hold for each."""
    if request.param == "memory":
        return memory_store
    db_path = str(tmp_path / "profiles.db")
    SQLiteMigrator(db_path).run_migrations()
    return SQLiteProfileStore(db_path, time=clock)


@pytest.fixture
def seed_content():
    return DevSeedContent()


@pytest.fixture
def provider():
    """Signed-in u1 / a@x.com."""
    return StaticIdentityProvider(
        Identity(id="u1", username="alice"),
        IdentityAttributes(email="a@x.com", name="Alice Example"),
    )


@pytest.fixture
def rules_path() -> Path:
    return Path(__file__).parent.parent / "rules.yaml"


def make_profile(profile_id: str = "u1", **overrides) -> Profile:
    data = {
        "id": profile_id,
        "owner": profile_id,
        "email": f"{profile_id}@example.com",
        "display_name": profile_id,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    data.update(overrides)
    return Profile(**data)


def legacy_doc(profile_id: str, **fields) -> dict:
    """A stored row as older clients wrote it: no email, no display_name."""
    doc = {
        "id": profile_id,
        "owner": profile_id,
        "tier": "FREE",
        "seed_version": 0,
        "created_at": FIXED_NOW.isoformat(),
        "updated_at": FIXED_NOW.isoformat(),
    }
    doc.update(fields)
    return doc


@pytest.fixture(name="make_profile")
def make_profile_fixture():
    return make_profile


@pytest.fixture(name="legacy_doc")
def legacy_doc_fixture():
    return legacy_doc
