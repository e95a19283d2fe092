"""
Admin Profiles API.

Listing that tolerates legacy null emails, the placeholder email backfill,
the email probe and manual release of a stuck seed claim.
All routes require an admin identity.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_profile_store, get_reader, get_rules, require_admin
from src.api.schemas import (
    BackfillResponse,
    ProbeFailureModel,
    ProbeResponse,
    ProfileListResponse,
    ProfileResponse,
    ReleaseClaimResponse,
)
from src.components.profile_admin import run_backfill_missing_emails, run_probe_missing_emails
from src.components.profile_reader import EmailFallbackReader, ProfileListResult
from src.components.seed import run_release_stale_claim
from src.core.ports.identity import IdentityProviderPort
from src.core.ports.store import ProfileStorePort
from src.rules.models import Rules

router = APIRouter()


def _list_response(result: ProfileListResult) -> ProfileListResponse:
    return ProfileListResponse(
        items=[ProfileResponse.from_profile(p) for p in result.items],
        cursor=result.cursor,
        provenance=result.provenance,
    )


@router.get("", response_model=ProfileListResponse)
def list_profiles(
    cursor: str | None = None,
    mode: Literal["full", "reduced"] = "full",
    all_pages: bool = Query(False, alias="all"),
    email: str | None = None,
    reader: EmailFallbackReader = Depends(get_reader),
    _admin: IdentityProviderPort = Depends(require_admin),
) -> ProfileListResponse:
    """List profiles, one page at a time or all at once."""
    if email:
        return _list_response(reader.find_by_email(email))
    if all_pages:
        return _list_response(reader.list_all())
    return _list_response(reader.list(cursor=cursor, mode=mode))


@router.post("/backfill-email", response_model=BackfillResponse)
def backfill_email(
    store: ProfileStorePort = Depends(get_profile_store),
    rules: Rules = Depends(get_rules),
    _admin: IdentityProviderPort = Depends(require_admin),
) -> BackfillResponse:
    result = run_backfill_missing_emails(
        store,
        domain=rules.reader.placeholder_email_domain,
        page_size=rules.reader.page_size,
    )
    return BackfillResponse(
        updated=result.updated,
        skipped=result.skipped,
        failed=result.failed,
        provenance=result.provenance,
    )


@router.get("/probe-email", response_model=ProbeResponse)
def probe_email(
    store: ProfileStorePort = Depends(get_profile_store),
    rules: Rules = Depends(get_rules),
    _admin: IdentityProviderPort = Depends(require_admin),
) -> ProbeResponse:
    result = run_probe_missing_emails(
        store,
        page_size=rules.reader.page_size,
        domain=rules.reader.placeholder_email_domain,
    )
    return ProbeResponse(
        ok=result.ok,
        missing=list(result.missing),
        failed=[ProbeFailureModel(profile_id=f.profile_id, message=f.message) for f in result.failed],
    )


@router.post("/{profile_id}/release-claim", response_model=ReleaseClaimResponse)
def release_claim(
    profile_id: str,
    store: ProfileStorePort = Depends(get_profile_store),
    _admin: IdentityProviderPort = Depends(require_admin),
) -> ReleaseClaimResponse:
    """Release a seed claim left behind by a failed rollback."""
    released = run_release_stale_claim(store, profile_id)
    return ReleaseClaimResponse(profile_id=profile_id, released=released)
