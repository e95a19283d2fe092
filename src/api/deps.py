import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.identity import TokenIdentityProvider
from src.adapters.clock import SystemClock
from src.adapters.dev_seed import DevSeedContent
from src.adapters.sqlite.repos import SQLiteProfileStore
from src.components.bootstrap import BootstrapConfig
from src.components.profile.models import IdentityConfig
from src.components.profile_admin import is_admin
from src.components.profile_reader import EmailFallbackReader
from src.core.ports.identity import IdentityProviderPort, NotAuthenticatedError
from src.core.ports.store import ProfileStorePort
from src.rules.loader import bootstrap_config, identity_config, load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PB_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "profiles.db")
        self.rules_path = Path(os.environ.get("PB_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.secret_key = os.environ.get("PB_SECRET_KEY", "dev-secret-unsafe")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_bootstrap_config(rules: Rules = Depends(get_rules)) -> BootstrapConfig:
    return bootstrap_config(rules)


def get_identity_config(rules: Rules = Depends(get_rules)) -> IdentityConfig:
    return identity_config(rules)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Store ---
def get_profile_store(settings: Settings = Depends(get_settings)) -> ProfileStorePort:
    return SQLiteProfileStore(settings.db_path, time=get_clock())


def get_reader(
    store: ProfileStorePort = Depends(get_profile_store),
    rules: Rules = Depends(get_rules),
) -> EmailFallbackReader:
    return EmailFallbackReader(store, page_size=rules.reader.page_size)


# Seed content singleton; the dev adapter only logs
_seed_content_instance: DevSeedContent | None = None


def get_seed_content() -> DevSeedContent:
    """Get seed content singleton."""
    global _seed_content_instance
    if _seed_content_instance is None:
        _seed_content_instance = DevSeedContent()
    return _seed_content_instance


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_identity_provider(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Settings = Depends(get_settings),
) -> IdentityProviderPort:
    """Identity for this request; resolved per request, never cached."""
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ", 1)[1]

    # 2. Header token comes from oauth2_scheme; a missing token surfaces as
    # NotAuthenticatedError when the identity is first read
    return TokenIdentityProvider(token, settings.secret_key)


def require_admin(
    provider: IdentityProviderPort = Depends(get_identity_provider),
    config: IdentityConfig = Depends(get_identity_config),
) -> IdentityProviderPort:
    try:
        provider.current_identity()
        attributes = provider.current_attributes()
        claims = provider.current_session_claims()
    except NotAuthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.reason,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    if not is_admin(attributes, claims, config):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return provider
