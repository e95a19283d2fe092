"""
Profile API.

POST /bootstrap ensures the caller's profile exists and optionally seeds demo
content; POST /reset-seed reopens the seed gate and seeds again; GET /me
reads the profile back through the email fallback.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.dev_seed import DevSeedContent
from src.api.deps import (
    get_bootstrap_config,
    get_clock,
    get_identity_provider,
    get_profile_store,
    get_reader,
    get_seed_content,
)
from src.api.schemas import (
    BootstrapRequest,
    BootstrapResponse,
    ProfileReadResponse,
    ProfileResponse,
    ResetSeedResponse,
)
from src.components.bootstrap import (
    BootstrapConfig,
    BootstrapInput,
    BootstrapOutput,
    run_bootstrap,
    run_reset_and_reseed,
)
from src.components.profile_reader import EmailFallbackReader
from src.core.ports.identity import IdentityProviderPort
from src.core.ports.store import ProfileStorePort

router = APIRouter()


def _bootstrap_response(result: BootstrapOutput) -> BootstrapResponse:
    return BootstrapResponse(
        profile_id=result.profile_id,
        did_seed_demo=result.did_seed_demo,
        created=result.created,
        seed_outcome=result.seed_outcome.value if result.seed_outcome else None,
        healed_fields=list(result.healed_fields),
    )


@router.post("/bootstrap", response_model=BootstrapResponse)
def bootstrap_profile(
    body: BootstrapRequest | None = None,
    provider: IdentityProviderPort = Depends(get_identity_provider),
    store: ProfileStorePort = Depends(get_profile_store),
    content: DevSeedContent = Depends(get_seed_content),
    clock: SystemClock = Depends(get_clock),
    config: BootstrapConfig = Depends(get_bootstrap_config),
) -> BootstrapResponse:
    """Ensure the caller's profile exists; seed demo content when asked."""
    want_seed = body.want_seed if body else False
    result = run_bootstrap(
        BootstrapInput(want_seed=want_seed),
        provider,
        store,
        content,
        clock,
        config,
    )
    return _bootstrap_response(result)


@router.post("/reset-seed", response_model=ResetSeedResponse)
def reset_seed(
    provider: IdentityProviderPort = Depends(get_identity_provider),
    store: ProfileStorePort = Depends(get_profile_store),
    content: DevSeedContent = Depends(get_seed_content),
    clock: SystemClock = Depends(get_clock),
    config: BootstrapConfig = Depends(get_bootstrap_config),
) -> ResetSeedResponse:
    """Reopen the caller's seed gate and seed demo content again."""
    result = run_reset_and_reseed(provider, store, content, clock, config)
    return ResetSeedResponse(reset=result.reset, bootstrap=_bootstrap_response(result.bootstrap))


@router.get("/me", response_model=ProfileReadResponse)
def read_my_profile(
    provider: IdentityProviderPort = Depends(get_identity_provider),
    reader: EmailFallbackReader = Depends(get_reader),
) -> ProfileReadResponse:
    identity = provider.current_identity()
    result = reader.get(identity.id)
    if result.profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found; call /api/profile/bootstrap first",
        )
    return ProfileReadResponse(
        profile=ProfileResponse.from_profile(result.profile),
        provenance=result.provenance,
    )
